import json

from sqlalchemy import Column, Integer, String, Text, DateTime, Float

from racketrank.core.database import Base


class GeoCache(Base):
    """Coordinate -> location cache. Keyed by the raw "lat-lng" text."""
    __tablename__ = "geo_cache"

    cache_key = Column(String(100), primary_key=True)
    district = Column(String(100), nullable=False, default="Unknown")
    city = Column(String(100), nullable=False, default="Unknown")
    country = Column(String(100), nullable=False, default="Unknown")  # canonical
    latitude = Column(Float)
    longitude = Column(Float)
    updated_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)


class CountryRankingsCache(Base):
    """Country -> top rankings cache. One row per canonical country."""
    __tablename__ = "country_rankings_cache"

    country = Column(String(100), primary_key=True)
    country_variants = Column(Text, nullable=False)  # JSON list
    rankings = Column(Text, nullable=False)  # JSON list of players
    player_count = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)

    def get_rankings(self):
        """Get the cached players as a list of dicts."""
        return json.loads(self.rankings) if self.rankings else []

    def set_rankings(self, players):
        self.rankings = json.dumps(players)
        self.player_count = len(players)

    def get_country_variants(self):
        return json.loads(self.country_variants) if self.country_variants else []

    def set_country_variants(self, variants):
        self.country_variants = json.dumps(list(variants))
