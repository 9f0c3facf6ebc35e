"""
Database migration script to set up the profile and cache schema.

Runs against SQLite or PostgreSQL. Cache timestamps are timezone-aware to
match the models; on SQLite they are stored as UTC text.
"""
import os

from dotenv import load_dotenv
from sqlalchemy import create_engine, text

# Load environment variables
load_dotenv()

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    "sqlite:///./racketrank.db"
)


def column_types(dialect_name):
    """Primary key and timestamp DDL for the target database."""
    if dialect_name == "postgresql":
        return "SERIAL PRIMARY KEY", "TIMESTAMP WITH TIME ZONE"
    return "INTEGER PRIMARY KEY AUTOINCREMENT", "TIMESTAMP"


def run_migrations(database_url=None):
    """Run database migrations."""
    engine = create_engine(database_url or DATABASE_URL)
    serial_pk, timestamp = column_types(engine.dialect.name)

    with engine.connect() as conn:
        # Profiles are normally owned by the profile service; create for local runs
        conn.execute(text(f"""
            CREATE TABLE IF NOT EXISTS profiles (
                id {serial_pk},
                first_name VARCHAR(100),
                last_name VARCHAR(100),
                rating FLOAT,
                region VARCHAR(100),
                city VARCHAR(100),
                country VARCHAR(100),
                avatar_url VARCHAR(500),
                created_at {timestamp} DEFAULT CURRENT_TIMESTAMP
            )
        """))

        conn.execute(text(f"""
            CREATE TABLE IF NOT EXISTS geo_cache (
                cache_key VARCHAR(100) PRIMARY KEY,
                district VARCHAR(100) NOT NULL DEFAULT 'Unknown',
                city VARCHAR(100) NOT NULL DEFAULT 'Unknown',
                country VARCHAR(100) NOT NULL DEFAULT 'Unknown',
                latitude FLOAT,
                longitude FLOAT,
                updated_at {timestamp} NOT NULL,
                expires_at {timestamp} NOT NULL
            )
        """))

        conn.execute(text(f"""
            CREATE TABLE IF NOT EXISTS country_rankings_cache (
                country VARCHAR(100) PRIMARY KEY,
                country_variants TEXT NOT NULL,
                rankings TEXT NOT NULL,
                player_count INTEGER NOT NULL DEFAULT 0,
                updated_at {timestamp} NOT NULL,
                expires_at {timestamp} NOT NULL
            )
        """))

        # Create indexes for performance
        for sql in [
            "CREATE INDEX IF NOT EXISTS idx_profiles_rating ON profiles (rating) WHERE rating IS NOT NULL",
            "CREATE INDEX IF NOT EXISTS idx_geo_cache_expires ON geo_cache (expires_at)",
            "CREATE INDEX IF NOT EXISTS idx_rankings_cache_expires ON country_rankings_cache (expires_at)",
        ]:
            conn.execute(text(sql))

        conn.commit()

    engine.dispose()
    print("Database migrations completed successfully.")


if __name__ == "__main__":
    print("Starting database migration...")

    # Run migrations
    run_migrations()

    print("Migration complete!")
