"""Repository classes"""

from darkcase_recommendation_service.repos.catalog_repository import CatalogRepository
from darkcase_recommendation_service.repos.history_repository import HistoryRepository

__all__ = [
    "CatalogRepository",
    "HistoryRepository",
]
