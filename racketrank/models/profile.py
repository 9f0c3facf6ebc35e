from sqlalchemy import Column, Integer, String, DateTime, Float
from sqlalchemy.sql import func

from racketrank.core.database import Base


class Profile(Base):
    """Player profile as stored upstream. Read-only to the rankings service."""
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    first_name = Column(String(100))
    last_name = Column(String(100))
    rating = Column(Float, index=True)  # NULL until the player is rated
    region = Column(String(100))  # district
    city = Column(String(100))
    country = Column(String(100))  # not normalized: "Turkiye", "Türkiye", "Turkey", ...
    avatar_url = Column(String(500))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "rating": self.rating,
            "region": self.region,
            "city": self.city,
            "country": self.country,
            "avatar_url": self.avatar_url,
        }
