"""SQLAlchemy models"""

from darkcase_recommendation_service.models.base import Base
from darkcase_recommendation_service.models.case import Case
from darkcase_recommendation_service.models.user_history import UserHistory

__all__ = [
    "Base",
    "Case",
    "UserHistory",
]
