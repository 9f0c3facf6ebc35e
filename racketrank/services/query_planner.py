"""
Builds and runs the profile store query behind a leaderboard.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from racketrank.core.config import settings
from racketrank.core.country_names import is_known, normalize_country, variants_for
from racketrank.core.exceptions import StoreQueryError
from racketrank.models.profile import Profile
from racketrank.schemas.location import LocationLevel, LocationQuery

logger = logging.getLogger(__name__)

# district is stored in the "region" column
LEVEL_COLUMNS = {
    LocationLevel.DISTRICT: "region",
    LocationLevel.CITY: "city",
    LocationLevel.COUNTRY: "country",
}


@dataclass(frozen=True)
class QueryFilter:
    """Case-insensitive substring match of one column against any of the patterns."""
    column: str
    patterns: Tuple[str, ...]
    limit: int


class RankingQueryPlanner:

    def plan(self, level: LocationLevel, location: LocationQuery) -> Optional[QueryFilter]:
        """
        Build the filter for a level, or None when the target is missing/"Unknown".

        None means "do not query": the caller answers with an empty leaderboard.
        """
        target = getattr(location, level.value)
        if not is_known(target):
            logger.info(f"No {level.value} to filter on - skipping store query")
            return None

        if level == LocationLevel.COUNTRY:
            variants = variants_for(normalize_country(target))
            return QueryFilter(
                column=LEVEL_COLUMNS[level],
                patterns=variants,
                limit=settings.COUNTRY_RANKINGS_LIMIT
            )

        return QueryFilter(
            column=LEVEL_COLUMNS[level],
            patterns=(target.strip(),),
            limit=settings.LOCATION_RANKINGS_LIMIT
        )

    def execute(self, db: Session, query_filter: QueryFilter) -> List[Profile]:
        """Top rated profiles matching the filter, rating descending."""
        column = getattr(Profile, query_filter.column)
        try:
            # No secondary sort key: ties keep the store's own order
            rows = db.query(Profile).filter(
                Profile.rating.isnot(None),
                or_(*[column.icontains(pattern, autoescape=True) for pattern in query_filter.patterns])
            ).order_by(
                Profile.rating.desc()
            ).limit(query_filter.limit).all()
        except SQLAlchemyError as e:
            db.rollback()
            raise StoreQueryError(str(e)) from e

        logger.info(f"Query on {query_filter.column} returned {len(rows)} results")
        if not rows:
            self._log_stored_values(db, query_filter.column)
        return rows

    def interpret(self, rows: List[Profile]) -> Dict[str, Any]:
        data = [row.to_dict() for row in rows]
        return {"count": len(data), "data": data}

    def _log_stored_values(self, db: Session, column_name: str) -> None:
        """Log a few values actually stored in the column, to debug filter misses."""
        if not logger.isEnabledFor(logging.DEBUG):
            return
        column = getattr(Profile, column_name)
        try:
            values = db.query(column).filter(
                Profile.rating.isnot(None),
                column.isnot(None)
            ).distinct().limit(10).all()
        except SQLAlchemyError as e:
            db.rollback()
            logger.debug(f"Could not sample stored {column_name} values: {e}")
            return
        logger.debug(f"Sample stored {column_name} values: {', '.join(v for (v,) in values)}")


ranking_query_planner = RankingQueryPlanner()
