"""Repository for user watch history."""

from typing import Dict, List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import desc, func
from datetime import datetime, UTC
import logging

from darkcase_recommendation_service.models import Case
from darkcase_recommendation_service.models import UserHistory
from darkcase_recommendation_service.scoring import WatchHistoryEntry

logger = logging.getLogger(__name__)


def clamp_progress(progress: float) -> int:
    """Clamp a reported progress value to an integer percent in [0, 100]."""
    return int(max(0, min(100, progress)))


class HistoryRepository:
    """
    Repository for user watch history.
    """

    def __init__(self, db: Session):
        self.db = db

    def record_progress(
            self,
            user_id: str,
            case_id: str,
            progress: float,
            watched_at: Optional[datetime] = None
    ) -> UserHistory:
        """
        Insert or update the progress of a user on a case.

        Args:
            user_id: User ID
            case_id: Case ID
            progress: Playback progress in percent (clamped to 0..100)
            watched_at: Time of the report (default: now)

        Returns:
            UserHistory object
        """
        watched_at = watched_at or datetime.now(UTC)
        progress = clamp_progress(progress)

        entry = (
            self.db.query(UserHistory)
            .filter(
                UserHistory.user_id == user_id,
                UserHistory.case_id == case_id
            )
            .first()
        )

        if entry:
            entry.progress = progress  # type: ignore[assignment]
            entry.last_watched = watched_at  # type: ignore[assignment]
        else:
            entry = UserHistory(
                user_id=user_id,
                case_id=case_id,
                progress=progress,
                last_watched=watched_at
            )
            self.db.add(entry)

        self.db.commit()
        self.db.refresh(entry)

        logger.debug(f"Recorded progress {progress}% for user {user_id} on case {case_id}")
        return entry

    # noinspection PyTypeChecker
    def get_history(self, user_id: str, limit: int = 50) -> List[UserHistory]:
        """
        Get a user's most recent history rows.

        Args:
            user_id: User ID
            limit: Maximum number of rows

        Returns:
            List of UserHistory objects, most recent first
        """
        return (
            self.db.query(UserHistory)
            .filter(UserHistory.user_id == user_id)
            .order_by(desc(UserHistory.last_watched))
            .limit(limit)
            .all()
        )

    def get_history_entries(self, user_id: str, limit: int = 50) -> List[WatchHistoryEntry]:
        """Get a user's most recent history as scorer input."""
        return [
            WatchHistoryEntry(
                item_id=str(row.case_id),
                progress=row.progress or 0,
                last_watched=row.last_watched
            )
            for row in self.get_history(user_id, limit=limit)
        ]

    def get_history_with_cases(self, user_id: str, limit: int = 50) -> List[Dict]:
        """
        Get a user's history joined with cached case data.

        Args:
            user_id: User ID
            limit: Maximum number of rows

        Returns:
            List of case dicts with progress and last_watched added
        """
        results = (
            self.db.query(UserHistory, Case)
            .join(Case, UserHistory.case_id == Case.id)
            .filter(UserHistory.user_id == user_id)
            .order_by(desc(UserHistory.last_watched))
            .limit(limit)
            .all()
        )

        history = []
        for entry, case in results:
            item = case.to_dict()
            item['progress'] = entry.progress
            item['last_watched'] = entry.last_watched
            history.append(item)

        return history

    def get_history_stats(self) -> Dict:
        """Get statistics about stored watch history."""
        total_entries = self.db.query(UserHistory).count()
        unique_users = (
            self.db.query(UserHistory.user_id)
            .distinct()
            .count()
        )

        latest = self.db.query(func.max(UserHistory.last_watched)).scalar()

        return {
            'total_entries': total_entries,
            'unique_users': unique_users,
            'avg_entries_per_user': total_entries / unique_users if unique_users > 0 else 0,
            'last_watched': latest
        }
