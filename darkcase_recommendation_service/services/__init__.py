"""Service classes"""

from .catalog_loader_service import CaseDataLoader
from .recommendation_service import RecommendationService

__all__ = ["CaseDataLoader", "RecommendationService"]
