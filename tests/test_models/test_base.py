"""Unit tests for darkcase_recommendation_service.models.base."""
from sqlalchemy.orm import DeclarativeMeta

from darkcase_recommendation_service.models.base import Base


class TestBase:
    """Tests for Base declarative base."""

    def test_base_is_declarative_base(self):
        assert hasattr(Base, 'metadata')
        assert hasattr(Base, 'registry')
        assert isinstance(Base, DeclarativeMeta)

    def test_base_registers_model_tables(self):
        """Test that importing the models registers their tables."""
        import darkcase_recommendation_service.models  # noqa: F401

        assert 'cases' in Base.metadata.tables
        assert 'user_history' in Base.metadata.tables
