"""Cached case catalog entry"""
from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Float, Integer, String, Text
from sqlalchemy.dialects.mysql import JSON

from darkcase_recommendation_service.models.base import Base


class Case(Base):
    """Cached true-crime case.
    Mirrors the catalog owned by the platform backend.
    """
    __tablename__ = 'cases'

    id = Column(String(36), primary_key=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    country = Column(String(100), nullable=True)
    crime_type = Column(JSON, nullable=True)
    tags = Column(JSON, nullable=True)
    year = Column(Integer, nullable=True)
    status = Column(String(20), nullable=True)
    rating = Column(Float, nullable=True)
    poster = Column(String(500), nullable=True)

    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    synced_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    def to_dict(self) -> dict:
        """Serialise to the camelCase shape the Mini App consumes."""
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'country': self.country,
            'crimeType': self.crime_type,
            'tags': self.tags,
            'year': self.year,
            'status': self.status,
            'rating': self.rating,
            'poster': self.poster,
        }

    def __repr__(self):
        return f"<Case(id={self.id!r}, title='{self.title}')>"
