"""
Create the recommendation service tables if they do not exist.
"""

import sys
from pathlib import Path

# Add parent directory to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

import logging

from sqlalchemy import inspect
from sqlalchemy.exc import OperationalError

from darkcase_recommendation_service.models import Base
from darkcase_recommendation_service.models.database import engine

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def create_tables(bind=engine) -> list[str]:
    """
    Create all model tables.

    Args:
        bind: Engine to create tables on

    Returns:
        Names of tables present after creation
    """
    Base.metadata.create_all(bind)
    tables = inspect(bind).get_table_names()
    logger.info(f"✓ Tables ready: {', '.join(sorted(tables))}")
    return tables


def main() -> int:
    try:
        create_tables()
    except OperationalError as e:
        logger.error(f"Database is not available: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
