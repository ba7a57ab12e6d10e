"""Service for personalised case recommendations."""
import math
from datetime import UTC, datetime
from typing import List, Dict, Optional, Sequence
import logging

from darkcase_recommendation_service.repos import CatalogRepository, HistoryRepository
from darkcase_recommendation_service.models.database import SessionLocal
from darkcase_recommendation_service.scoring import (
    CandidateScorer,
    CatalogItem,
    PreferenceProfileBuilder,
    ScoringWeights,
    WatchHistoryEntry,
    order_history,
    rank_by_rating,
)
from darkcase_recommendation_service.config import (
    get_history_window,
    get_scoring_weights,
)

logger = logging.getLogger(__name__)


def _unique_by_id(catalog: Sequence[CatalogItem]) -> List[CatalogItem]:
    seen = set()
    unique = []
    for item in catalog:
        if item.id not in seen:
            seen.add(item.id)
            unique.append(item)
    return unique


def _parse_timestamp(value) -> Optional[datetime]:
    """Parse a backend ISO-8601 timestamp, normalised to UTC. Unparsable values give None."""
    if value is None or isinstance(value, datetime):
        return value
    try:
        parsed = datetime.fromisoformat(str(value))
    except ValueError:
        logger.debug(f"Ignoring unparsable timestamp: {value!r}")
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(UTC)
    return parsed


class RecommendationService:
    """
    Service for personalised case recommendations.
    Ranks unwatched cases by the user's watch history preferences and pads
    the list with the best-rated remaining cases.
    """

    def __init__(
            self,
            weights: Optional[ScoringWeights] = None,
            history_window: Optional[int] = None
    ):
        """
        Initialize the recommendation service.

        Args:
            weights: Facet multipliers (None = read from config)
            history_window: Number of most recent history entries to use (None = read from config)
        """
        self.weights = weights or ScoringWeights.from_dict(get_scoring_weights())
        self.history_window = history_window if history_window is not None else get_history_window()

        self.profile_builder = PreferenceProfileBuilder()
        self.scorer = CandidateScorer(self.weights)

        logger.info("Initialized RecommendationService")
        logger.info(
            f"Weights - Crime type: {self.weights.crime_type}, Country: {self.weights.country}, "
            f"Tag: {self.weights.tag}, Rating: {self.weights.rating}"
        )

    def recommend(
            self,
            history: Sequence[WatchHistoryEntry],
            catalog: Sequence[CatalogItem],
            limit: int = 20
    ) -> List[CatalogItem]:
        """
        Produce an ordered recommendation list.

        Never raises: any internal failure is logged and yields an empty list.

        Args:
            history: User watch history, in any order
            catalog: Full catalog
            limit: Maximum number of recommendations

        Returns:
            Up to `limit` catalog items, best first
        """
        try:
            if limit <= 0 or not catalog:
                return []
            return self._recommend(history, catalog, limit)
        except Exception as e:
            logger.error(f"Error computing recommendations: {str(e)}", exc_info=True)
            return []

    def _recommend(
            self,
            history: Sequence[WatchHistoryEntry],
            catalog: Sequence[CatalogItem],
            limit: int
    ) -> List[CatalogItem]:
        catalog = _unique_by_id(catalog)
        ordered = order_history(history)

        if not ordered:
            return rank_by_rating(catalog)[:limit]

        watched_ids = {entry.item_id for entry in ordered}
        items_by_id = {item.id: item for item in catalog}

        # Unknown items still count as watched, but cannot shape the profile
        watched = [
            (items_by_id[entry.item_id], entry.progress)
            for entry in ordered
            if entry.item_id in items_by_id
        ]

        profile = self.profile_builder.build(watched)
        ranked = self.scorer.rank(profile, catalog, watched_ids)
        selected = [candidate.item for candidate in ranked[:limit]]

        if len(selected) < limit:
            selected_ids = {item.id for item in selected}
            for item in rank_by_rating(catalog):
                if len(selected) >= limit:
                    break
                if item.id in watched_ids or item.id in selected_ids:
                    continue
                selected.append(item)
                selected_ids.add(item.id)

        return selected

    def get_recommendations_for_user(self, user_id: str, limit: int = 20) -> List[Dict]:
        """
        Get recommendations for a user from the cached catalog and stored history.

        Args:
            user_id: User ID
            limit: Number of recommendations

        Returns:
            List of case dicts, best first
        """
        db = SessionLocal()
        try:
            catalog_repo = CatalogRepository(db)
            history_repo = HistoryRepository(db)

            catalog = catalog_repo.get_catalog_items()
            history = history_repo.get_history_entries(user_id, limit=self.history_window)

            items = self.recommend(history, catalog, limit)

            cases_by_id = {
                str(case.id): case
                for case in catalog_repo.get_cases_by_ids([item.id for item in items])
            }
            logger.info(
                f"Recommended {len(items)} cases for user {user_id} "
                f"({len(history)} history entries, {len(catalog)} cached cases)"
            )
            return [cases_by_id[item.id].to_dict() for item in items]
        finally:
            db.close()

    def record_progress(self, user_id: str, case_id: str, progress: float) -> Dict:
        """
        Record playback progress for a user.

        Args:
            user_id: User ID
            case_id: Case ID
            progress: Progress in percent (clamped to 0..100)

        Returns:
            Dict with the stored entry
        """
        db = SessionLocal()
        try:
            entry = HistoryRepository(db).record_progress(user_id, case_id, progress)
            return {
                'user_id': entry.user_id,
                'case_id': entry.case_id,
                'progress': entry.progress,
                'last_watched': entry.last_watched
            }
        finally:
            db.close()

    def get_history(self, user_id: str, limit: int = 50) -> List[Dict]:
        """Get a user's watch history with case data, most recent first."""
        db = SessionLocal()
        try:
            return HistoryRepository(db).get_history_with_cases(user_id, limit=limit)
        finally:
            db.close()

    def sync_catalog_to_db(self, cases_data: List[Dict]) -> int:
        """
        Replace the cached catalog with cases from the platform backend.

        Args:
            cases_data: List of case payloads (camelCase or snake_case keys)

        Returns:
            Number of cases stored
        """
        logger.info(f"Syncing {len(cases_data)} cases to database...")

        db = SessionLocal()
        try:
            repo = CatalogRepository(db)

            formatted_data = []
            for case in cases_data:
                # Handle NaN values - convert to None for database
                rating = case.get('rating')
                if rating is not None and (
                    isinstance(rating, float) and math.isnan(rating)
                ):
                    rating = None
                year = case.get('year')
                formatted_data.append({
                    'id': str(case['id']),
                    'title': case.get('title') or '',
                    'description': case.get('description'),
                    'country': case.get('country'),
                    'crime_type': case.get('crimeType', case.get('crime_type')),
                    'tags': case.get('tags'),
                    'year': int(year) if year is not None else None,
                    'status': case.get('status'),
                    'rating': rating,
                    'poster': case.get('poster'),
                    'created_at': _parse_timestamp(case.get('createdAt', case.get('created_at'))),
                })

            count = repo.bulk_store_cases(formatted_data)
            logger.info(f"✓ Synced {count} cases to database")
            return count

        finally:
            db.close()

    def get_stats(self) -> Dict:
        """Get statistics about the recommendation system."""
        db = SessionLocal()
        try:
            catalog_repo = CatalogRepository(db)
            history_repo = HistoryRepository(db)

            return {
                'cached_cases': catalog_repo.count_cases(),
                'history_stats': history_repo.get_history_stats(),
                'history_window': self.history_window,
                'weights': self.weights.as_dict()
            }
        finally:
            db.close()
