"""Per-user playback progress."""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Index, Integer, String

from darkcase_recommendation_service.models.base import Base


class UserHistory(Base):
    """Playback progress of one user on one case.

    One row per (user, case) pair; reporting progress again overwrites it.
    """

    __tablename__ = "user_history"

    # Composite primary key
    user_id = Column(String(64), primary_key=True)
    case_id = Column(String(36), primary_key=True)

    progress = Column(Integer, nullable=False, default=0)  # percent, 0..100
    last_watched = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        Index("idx_user_last_watched", "user_id", "last_watched"),
    )

    def __repr__(self):
        return (
            f"<UserHistory(user_id={self.user_id!r}, case_id={self.case_id!r}, "
            f"progress={self.progress})>"
        )
