"""Value types shared by the recommendation scoring engine."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Optional, Tuple


class CaseStatus(Enum):
    """Investigation status of a case."""
    SOLVED = "Solved"
    UNSOLVED = "Unsolved"
    COLD_CASE = "Cold Case"

    @classmethod
    def parse(cls, value) -> Optional["CaseStatus"]:
        """Map a stored status string to a member, or None if unrecognised."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        normalized = value.strip().lower().replace("_", " ")
        if normalized == "coldcase":
            normalized = "cold case"
        for member in cls:
            if member.value.lower() == normalized:
                return member
        return None


@dataclass(frozen=True)
class CatalogItem:
    """A case as seen by the scorer. Facets are already validated."""
    id: str
    country: Optional[str] = None
    crime_types: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()
    year: Optional[int] = None
    status: Optional[CaseStatus] = None
    rating: float = 0.0
    title: Optional[str] = None


@dataclass(frozen=True)
class WatchHistoryEntry:
    """Playback progress of one catalog item."""
    item_id: str
    progress: int = 0
    last_watched: Optional[datetime] = None


@dataclass
class PreferenceProfile:
    """Accumulated facet weights derived from a user's watch history."""
    countries: Dict[str, float] = field(default_factory=dict)
    crime_types: Dict[str, float] = field(default_factory=dict)
    tags: Dict[str, float] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not (self.countries or self.crime_types or self.tags)


@dataclass(frozen=True)
class ScoredCandidate:
    item: CatalogItem
    score: float


@dataclass(frozen=True)
class ScoringWeights:
    """
    Facet multipliers applied at scoring time.

    A crime-type match must outweigh a country match, which must outweigh a
    tag match, which must outweigh the rating boost.
    """
    country: float = 2.0
    crime_type: float = 3.0
    tag: float = 1.5
    rating: float = 0.5

    def __post_init__(self):
        values = (self.crime_type, self.country, self.tag, self.rating)
        if any(v < 0 for v in values):
            raise ValueError(f"Scoring weights must be non-negative: {self}")
        if not (self.crime_type > self.country > self.tag > self.rating):
            raise ValueError(
                "Scoring weights must satisfy crime_type > country > tag > rating, "
                f"got {self}"
            )

    @classmethod
    def from_dict(cls, weights: Dict[str, float]) -> "ScoringWeights":
        defaults = cls()
        return cls(
            country=float(weights.get("country", defaults.country)),
            crime_type=float(weights.get("crime_type", defaults.crime_type)),
            tag=float(weights.get("tag", defaults.tag)),
            rating=float(weights.get("rating", defaults.rating)),
        )

    def as_dict(self) -> Dict[str, float]:
        return {
            "country": self.country,
            "crime_type": self.crime_type,
            "tag": self.tag,
            "rating": self.rating,
        }
