"""Build a user's preference profile from watch history."""
from typing import Dict, List, Sequence, Tuple
import logging

from darkcase_recommendation_service.scoring.types import (
    CatalogItem,
    PreferenceProfile,
    WatchHistoryEntry,
)

logger = logging.getLogger(__name__)


def completion_multiplier(progress: int) -> float:
    """Fully watched cases are a stronger signal than abandoned ones."""
    if progress > 50:
        return 1.5
    if progress > 20:
        return 1.2
    return 1.0


def order_history(entries: Sequence[WatchHistoryEntry]) -> List[WatchHistoryEntry]:
    """
    Order history most-recent-first and drop older duplicates of an item.

    Entries without a timestamp sort after all timestamped ones, keeping
    their relative input order.

    Args:
        entries: History entries in any order

    Returns:
        One entry per item id, most recently watched first
    """
    def sort_key(entry: WatchHistoryEntry) -> float:
        if entry.last_watched is None:
            return float('inf')
        return -entry.last_watched.timestamp()

    ordered = []
    seen = set()
    for entry in sorted(entries, key=sort_key):
        if entry.item_id in seen:
            continue
        seen.add(entry.item_id)
        ordered.append(entry)

    return ordered


class PreferenceProfileBuilder:
    """Accumulate facet weights over a most-recent-first watch history."""

    def build(self, watched: Sequence[Tuple[CatalogItem, int]]) -> PreferenceProfile:
        """
        Build a preference profile.

        Position i of N gets recency weight N - i, scaled by the completion
        multiplier of its progress. The same weight is added to the item's
        country, each crime type and each tag.

        Args:
            watched: (item, progress) pairs, most recently watched first

        Returns:
            PreferenceProfile (all mappings empty for an empty history)
        """
        profile = PreferenceProfile()
        total = len(watched)

        for index, (item, progress) in enumerate(watched):
            weight = (total - index) * completion_multiplier(progress)

            if item.country:
                _add(profile.countries, item.country, weight)
            for crime_type in item.crime_types:
                _add(profile.crime_types, crime_type, weight)
            for tag in item.tags:
                _add(profile.tags, tag, weight)

        logger.debug(
            f"Built profile from {total} items: {len(profile.countries)} countries, "
            f"{len(profile.crime_types)} crime types, {len(profile.tags)} tags"
        )
        return profile


def _add(weights: Dict[str, float], key: str, weight: float) -> None:
    weights[key] = weights.get(key, 0.0) + weight
