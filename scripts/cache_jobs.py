#!/usr/bin/env python3
"""
Maintenance jobs for the RacketRank rankings caches.
Run by hand or from cron.

Usage:
    python scripts/cache_jobs.py cache-stats
    python scripts/cache_jobs.py warm-rankings Turkey Germany ...
    python scripts/cache_jobs.py prefetch [API_BASE_URL]
"""

import sys
import logging
from datetime import datetime
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from racketrank.client import RankingsClient
from racketrank.core import database
from racketrank.core.exceptions import RankingsException
from racketrank.core.startup import initialize_database
from racketrank.models.cache import CountryRankingsCache, GeoCache
from racketrank.services.cache_layer import CacheLayer
from racketrank.services.leaderboard_service import LeaderboardCacheService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def show_cache_stats():
    """Show fresh vs. total entries for each cache table."""
    logger.info("=== CACHE STATISTICS ===")

    with database.SessionLocal() as db:
        try:
            for label, model, key in [
                ("Geo cache", GeoCache, "cache_key"),
                ("Country rankings cache", CountryRankingsCache, "country"),
            ]:
                # TTL is irrelevant for reads
                stats = CacheLayer(db, model, key, ttl=None).stats()
                logger.info(f"{label}: {stats['fresh_entries']}/{stats['total_entries']} fresh entries")
            return True

        except Exception as e:
            logger.error(f"Error getting cache stats: {e}")
            return False


def warm_rankings(countries):
    """Fill the country rankings cache for the given countries."""
    logger.info("=== WARMING COUNTRY RANKINGS ===")

    if not countries:
        logger.error("No countries given")
        return False

    ok = True
    with database.SessionLocal() as db:
        service = LeaderboardCacheService(db)
        for country in countries:
            try:
                result = service.get_country_rankings(country)
                state = "already cached" if result["cached"] else "fetched"
                logger.info(f"  {result['country']}: {result['count']} players ({state})")
            except RankingsException as e:
                logger.error(f"  {country}: {e}")
                ok = False
    return ok


def run_prefetch(base_url=None):
    """Run the client-side prefetch once against a running API."""
    logger.info("=== RANKINGS PREFETCH ===")

    payload = RankingsClient(base_url=base_url).prefetch()
    if payload is None:
        return False

    logger.info(f"Prefetched {len(payload['data'])} players for {payload['country']}")
    return True


def main():
    """Main CLI entry point."""
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    command = sys.argv[1]
    args = sys.argv[2:]

    if command in ("cache-stats", "warm-rankings"):
        if not database.is_configured():
            logger.error("DATABASE_URL is not set")
            sys.exit(1)
        initialize_database()

    start_time = datetime.now()

    if command == "cache-stats":
        success = show_cache_stats()
    elif command == "warm-rankings":
        success = warm_rankings(args)
    elif command == "prefetch":
        success = run_prefetch(args[0] if args else None)
    else:
        logger.error(f"Unknown command: {command}")
        print(__doc__)
        sys.exit(1)

    duration = datetime.now() - start_time
    logger.info(f"Command '{command}' completed in {duration}")

    if success:
        logger.info("Job completed successfully")
        sys.exit(0)
    else:
        logger.error("Job failed")
        sys.exit(1)


if __name__ == "__main__":
    main()
