"""Score and rank unwatched catalog items against a preference profile."""
import numpy as np
from typing import Iterable, List, Optional, Sequence
import logging

from darkcase_recommendation_service.scoring.types import (
    CatalogItem,
    PreferenceProfile,
    ScoredCandidate,
    ScoringWeights,
)

logger = logging.getLogger(__name__)


def stable_descending_order(values: Sequence[float]) -> np.ndarray:
    """Indices that sort values descending, ties kept in input order."""
    if len(values) == 0:
        return np.array([], dtype=int)
    return np.argsort(-np.asarray(values, dtype=float), kind="stable")


def rank_by_rating(items: Sequence[CatalogItem]) -> List[CatalogItem]:
    """Sort items by descending rating, ties kept in input order."""
    order = stable_descending_order([item.rating for item in items])
    return [items[i] for i in order]


class CandidateScorer:
    """Rank catalog items not yet watched by the user."""

    def __init__(self, weights: Optional[ScoringWeights] = None):
        """
        Initialize candidate scorer.

        Args:
            weights: Facet multipliers (default: country 2.0, crime type 3.0,
                tag 1.5, rating 0.5)
        """
        self.weights = weights or ScoringWeights()

    def score_item(self, profile: PreferenceProfile, item: CatalogItem) -> float:
        """
        Compute the relevance score of one item.

        Args:
            profile: User preference profile
            item: Candidate item

        Returns:
            Relevance score
        """
        score = 0.0

        if item.country and item.country in profile.countries:
            score += profile.countries[item.country] * self.weights.country

        for crime_type in item.crime_types:
            if crime_type in profile.crime_types:
                score += profile.crime_types[crime_type] * self.weights.crime_type

        for tag in item.tags:
            if tag in profile.tags:
                score += profile.tags[tag] * self.weights.tag

        score += item.rating * self.weights.rating

        return score

    def rank(
        self,
        profile: PreferenceProfile,
        catalog: Sequence[CatalogItem],
        watched_ids: Iterable[str] = ()
    ) -> List[ScoredCandidate]:
        """
        Score every unwatched item and sort by descending score.

        Ties keep the catalog's input order.

        Args:
            profile: User preference profile
            catalog: Full catalog
            watched_ids: Item ids to exclude

        Returns:
            Ranked list of ScoredCandidate
        """
        excluded = set(watched_ids)
        candidates = [item for item in catalog if item.id not in excluded]
        scores = [self.score_item(profile, item) for item in candidates]

        ranked = [
            ScoredCandidate(item=candidates[i], score=scores[i])
            for i in stable_descending_order(scores)
        ]

        logger.debug(f"Ranked {len(ranked)} candidates ({len(catalog) - len(candidates)} excluded)")
        return ranked
