"""Repository for the cached case catalog."""

import json
import logging
import math
from datetime import UTC, datetime
from typing import Iterable

from sqlalchemy import desc
from sqlalchemy.orm import Session

from darkcase_recommendation_service.models import Case
from darkcase_recommendation_service.scoring import CaseStatus, CatalogItem

logger = logging.getLogger(__name__)


def parse_facet_list(value) -> tuple[str, ...]:
    """
    Normalise a crime-type or tag field into a tuple of unique labels.

    Accepts a list or a JSON-encoded list. Anything that does not parse is
    treated as an empty collection.

    Args:
        value: Raw facet value (list, JSON string or None)

    Returns:
        Tuple of labels in first-seen order
    """
    if value is None:
        return ()

    if isinstance(value, str):
        if not value.strip():
            return ()
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            logger.debug(f"Skipping unparsable facet value: {value!r}")
            return ()

    if not isinstance(value, (list, tuple)):
        logger.debug(f"Skipping non-list facet value: {value!r}")
        return ()

    labels: list[str] = []
    for label in value:
        if isinstance(label, str) and label and label not in labels:
            labels.append(label)
    return tuple(labels)


def _parse_rating(value) -> float:
    try:
        rating = float(value)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if math.isnan(rating) else rating


def to_catalog_item(case: Case) -> CatalogItem:
    """Convert a cached case row into a validated CatalogItem."""
    return CatalogItem(
        id=str(case.id),
        country=case.country or None,
        crime_types=parse_facet_list(case.crime_type),
        tags=parse_facet_list(case.tags),
        year=case.year,
        status=CaseStatus.parse(case.status),
        rating=_parse_rating(case.rating),
        title=case.title,
    )


class CatalogRepository:
    """
    Repository for the cached case catalog.
    """

    def __init__(self, db: Session):
        self.db = db

    def _apply(self, case: Case, case_data: dict) -> None:
        case.title = case_data["title"]  # type: ignore[assignment]
        case.description = case_data.get("description")  # type: ignore[assignment]
        case.country = case_data.get("country")  # type: ignore[assignment]
        case.crime_type = list(parse_facet_list(case_data.get("crime_type")))  # type: ignore[assignment]
        case.tags = list(parse_facet_list(case_data.get("tags")))  # type: ignore[assignment]
        case.year = case_data.get("year")  # type: ignore[assignment]
        case.status = case_data.get("status")  # type: ignore[assignment]
        case.rating = case_data.get("rating")  # type: ignore[assignment]
        case.poster = case_data.get("poster")  # type: ignore[assignment]
        case.synced_at = datetime.now(UTC)  # type: ignore[assignment]
        if case_data.get("created_at") is not None:
            case.created_at = case_data["created_at"]  # type: ignore[assignment]

    def bulk_store_cases(self, cases_data: list[dict], batch_size: int = 100) -> int:
        """
        Replace the cached catalog.

        Args:
            cases_data: List of case data dicts
            batch_size: Batch size for inserts

        Returns:
            Number of cases stored
        """
        logger.info("Clearing existing catalog...")
        self.db.query(Case).delete()
        self.db.commit()

        # Rows without a backend timestamp share one, so ties fall back to id order
        synced_at = datetime.now(UTC)
        records = []
        seen = set()
        for case_data in cases_data:
            case_id = str(case_data["id"])
            if case_id in seen:
                logger.warning(f"Skipping duplicate case id {case_id}")
                continue
            seen.add(case_id)

            record = Case(id=case_id, created_at=synced_at)
            self._apply(record, case_data)
            records.append(record)

        count = 0
        for i in range(0, len(records), batch_size):
            batch = records[i : i + batch_size]
            self.db.bulk_save_objects(batch)
            self.db.commit()
            count += len(batch)

        logger.info(f"✓ Stored {count} cases")
        return count

    # noinspection PyTypeChecker
    def get_cases_by_ids(self, case_ids: Iterable[str]) -> list[Case]:
        """Get cached cases for the given IDs (missing IDs are ignored)."""
        ids = list(case_ids)
        if not ids:
            return []
        return self.db.query(Case).filter(Case.id.in_(ids)).all()

    # noinspection PyTypeChecker
    def get_all_cases(self) -> list[Case]:
        """Get the whole cached catalog, newest first."""
        return self.db.query(Case).order_by(desc(Case.created_at), Case.id).all()

    def get_catalog_items(self) -> list[CatalogItem]:
        """Get the whole catalog as scorer input, newest first."""
        return [to_catalog_item(case) for case in self.get_all_cases()]

    def count_cases(self) -> int:
        """Count cached cases."""
        return self.db.query(Case).count()
