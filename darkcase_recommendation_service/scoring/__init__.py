"""Recommendation scoring engine"""

from .candidate_scorer import CandidateScorer, rank_by_rating
from .profile_builder import PreferenceProfileBuilder, order_history
from .types import (
    CaseStatus,
    CatalogItem,
    PreferenceProfile,
    ScoredCandidate,
    ScoringWeights,
    WatchHistoryEntry,
)

__all__ = [
    "CandidateScorer",
    "CaseStatus",
    "CatalogItem",
    "PreferenceProfile",
    "PreferenceProfileBuilder",
    "ScoredCandidate",
    "ScoringWeights",
    "WatchHistoryEntry",
    "order_history",
    "rank_by_rating",
]
