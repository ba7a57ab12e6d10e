"""Shared test fixtures and configuration for pytest."""
import pytest
from datetime import datetime, timedelta, UTC
from pathlib import Path
from unittest.mock import Mock
from typing import Dict, List
import tempfile
import json
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session

from darkcase_recommendation_service.models.base import Base
from darkcase_recommendation_service.models.case import Case
from darkcase_recommendation_service.models.user_history import UserHistory
from darkcase_recommendation_service.scoring import CaseStatus, CatalogItem, WatchHistoryEntry


# ===== Database Fixtures =====

@pytest.fixture(scope="function")
def test_db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def test_db_session(test_db_engine):
    """Create a database session for testing."""
    SessionLocal = sessionmaker(bind=test_db_engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def session_factory(test_db_engine):
    """Session factory bound to the test engine, for patching SessionLocal."""
    return sessionmaker(autocommit=False, autoflush=False, bind=test_db_engine)


# ===== Sample Data Fixtures =====

@pytest.fixture
def sample_case_data() -> Dict:
    """Sample case payload as returned by the backend API."""
    return {
        'id': 'case-1',
        'title': 'The Zodiac Killer',
        'description': 'An unidentified serial killer active in Northern California.',
        'country': 'USA',
        'crimeType': ['Serial Killer'],
        'tags': ['cold-case', '1960s'],
        'year': 1969,
        'status': 'Unsolved',
        'rating': 9.1,
        'poster': '/uploads/zodiac.jpg',
    }


@pytest.fixture
def sample_cases_list() -> List[Dict]:
    """Catalog from the reference scenario: A, B and C."""
    return [
        {
            'id': 'A',
            'title': 'Case A',
            'country': 'USA',
            'crimeType': ['Serial Killer'],
            'tags': [],
            'year': 1978,
            'status': 'Solved',
            'rating': 8.0,
        },
        {
            'id': 'B',
            'title': 'Case B',
            'country': 'USA',
            'crimeType': [],
            'tags': ['cold-case'],
            'year': 1991,
            'status': 'Cold Case',
            'rating': 6.0,
        },
        {
            'id': 'C',
            'title': 'Case C',
            'country': 'France',
            'crimeType': [],
            'tags': [],
            'year': 2004,
            'status': 'Unsolved',
            'rating': 9.0,
        },
    ]


@pytest.fixture
def scenario_catalog() -> List[CatalogItem]:
    """Catalog items A, B and C from the reference scenario."""
    return [
        CatalogItem(id='A', country='USA', crime_types=('Serial Killer',), rating=8.0,
                    status=CaseStatus.SOLVED),
        CatalogItem(id='B', country='USA', tags=('cold-case',), rating=6.0,
                    status=CaseStatus.COLD_CASE),
        CatalogItem(id='C', country='France', rating=9.0, status=CaseStatus.UNSOLVED),
    ]


@pytest.fixture
def now() -> datetime:
    return datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def make_history(now):
    """Build history entries from (item_id, progress) pairs, most recent first."""
    def _make(pairs):
        return [
            WatchHistoryEntry(item_id=item_id, progress=progress, last_watched=now - timedelta(hours=i))
            for i, (item_id, progress) in enumerate(pairs)
        ]
    return _make


# ===== Mock Fixtures =====

@pytest.fixture
def mock_database_session():
    """Mock database session."""
    mock_session = Mock(spec=Session)
    mock_session.query.return_value = mock_session
    mock_session.filter.return_value = mock_session
    mock_session.first.return_value = None
    mock_session.all.return_value = []
    mock_session.count.return_value = 0
    mock_session.delete.return_value = None
    mock_session.commit.return_value = None
    mock_session.close.return_value = None
    mock_session.refresh.return_value = None
    return mock_session


# ===== Temporary Directory Fixtures =====

@pytest.fixture
def temp_data_dir():
    """Create a temporary directory for test data."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ===== Configuration Fixtures =====

@pytest.fixture
def mock_config(monkeypatch):
    """Mock configuration values."""
    monkeypatch.setenv('DATABASE_URL', 'sqlite:///:memory:')
    monkeypatch.setenv('BACKEND_API_URL', 'http://localhost:3000/api')
    monkeypatch.setenv('HISTORY_WINDOW', '50')


@pytest.fixture
def mock_local_settings(tmp_path):
    """Write a local.settings.json file and return its directory."""
    settings = {
        "Values": {
            "DATABASE_URL": "sqlite:///:memory:",
            "BACKEND_API_URL": "http://backend.local/api",
        }
    }

    settings_file = tmp_path / "local.settings.json"
    with open(settings_file, 'w') as f:
        json.dump(settings, f)

    return tmp_path


# ===== Azure Functions Fixtures =====

@pytest.fixture
def mock_http_request():
    """Mock Azure Functions HttpRequest."""
    mock_req = Mock()
    mock_req.route_params = {}
    mock_req.params = {}
    mock_req.get_json.return_value = {}
    return mock_req


# ===== Database Record Fixtures =====

@pytest.fixture
def sample_case_records(test_db_session) -> List[Case]:
    """Create scenario Case records in the test database."""
    base_time = datetime(2024, 1, 1)
    records = [
        Case(id='A', title='Case A', country='USA', crime_type=['Serial Killer'], tags=[],
             year=1978, status='Solved', rating=8.0, created_at=base_time + timedelta(days=3)),
        Case(id='B', title='Case B', country='USA', crime_type=[], tags=['cold-case'],
             year=1991, status='Cold Case', rating=6.0, created_at=base_time + timedelta(days=2)),
        Case(id='C', title='Case C', country='France', crime_type=[], tags=[],
             year=2004, status='Unsolved', rating=9.0, created_at=base_time + timedelta(days=1)),
    ]

    for record in records:
        test_db_session.add(record)
    test_db_session.commit()

    return records


@pytest.fixture
def sample_history_records(test_db_session) -> List[UserHistory]:
    """Create UserHistory records for user u1 in the test database."""
    records = [
        UserHistory(user_id='u1', case_id='A', progress=90, last_watched=datetime(2024, 5, 1, 12, 0)),
        UserHistory(user_id='u2', case_id='C', progress=10, last_watched=datetime(2024, 5, 1, 13, 0)),
    ]

    for record in records:
        test_db_session.add(record)
    test_db_session.commit()

    return records


# ===== Repository Fixtures =====

@pytest.fixture
def catalog_repository(test_db_session):
    """Create CatalogRepository with test database session."""
    from darkcase_recommendation_service.repos import CatalogRepository
    return CatalogRepository(test_db_session)


@pytest.fixture
def history_repository(test_db_session):
    """Create HistoryRepository with test database session."""
    from darkcase_recommendation_service.repos import HistoryRepository
    return HistoryRepository(test_db_session)
