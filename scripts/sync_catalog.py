"""
Sync the cached case catalog used for recommendations.
Cases are fetched from the platform backend API, or loaded from a CSV export.
"""

import sys
from pathlib import Path

# Add parent directory to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

import argparse
import logging

import numpy as np
import pandas as pd
import requests

from darkcase_recommendation_service.services import CaseDataLoader, RecommendationService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def clean_dataframe_for_db(df: pd.DataFrame) -> pd.DataFrame:
    """
    Clean DataFrame by replacing NaN/NA values with None for database compatibility.

    Args:
        df: Input DataFrame

    Returns:
        Cleaned DataFrame
    """
    df = df.astype(object)
    df = df.replace({np.nan: None, pd.NA: None})
    df = df.where(pd.notnull(df), None)

    return df


def load_cases_from_csv(csv_path: Path) -> list[dict]:
    """
    Load cases from a CSV export of the backend `cases` table.

    Args:
        csv_path: Path to the CSV file

    Returns:
        List of case dicts
    """
    if not csv_path.exists():
        raise FileNotFoundError(f"Catalog export not found: {csv_path}")

    cases_df = pd.read_csv(csv_path, dtype={'id': str})
    logger.info(f"Loaded {len(cases_df)} cases from {csv_path}")

    cases_df = clean_dataframe_for_db(cases_df)
    return cases_df.to_dict('records')


def load_cases_from_api(
    backend_url: str | None = None,
    batch_size: int = 100,
    max_cases: int | None = None
) -> list[dict]:
    """
    Load cases from the platform backend API.

    Args:
        backend_url: Backend API base URL (None = from config)
        batch_size: Cases per request
        max_cases: Optional cap on cases fetched

    Returns:
        List of case dicts
    """
    loader = CaseDataLoader(backend_api_url=backend_url)
    return loader.get_all_cases(batch_size=batch_size, max_cases=max_cases)


def preview_recommendations(service: RecommendationService, user_id: str, limit: int = 5) -> None:
    """Log a few recommendations for a user as a smoke test."""
    logger.info(f"\nRecommendations for user {user_id}:")
    recommendations = service.get_recommendations_for_user(user_id=user_id, limit=limit)

    if not recommendations:
        logger.info("  (none)")

    for i, rec in enumerate(recommendations, 1):
        logger.info(
            f"  {i}. {rec['title']} "
            f"(rating: {rec['rating']}, crime types: {rec['crimeType']})"
        )


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Sync the case catalog used for recommendations")
    parser.add_argument('--csv', type=Path, default=None,
                        help="Load cases from a CSV export instead of the backend API")
    parser.add_argument('--backend-url', default=None,
                        help="Backend API base URL (default: BACKEND_API_URL)")
    parser.add_argument('--batch-size', type=int, default=100,
                        help="Cases per API request")
    parser.add_argument('--max-cases', type=int, default=None,
                        help="Maximum number of cases to fetch (for testing)")
    parser.add_argument('--preview-user', default=None,
                        help="Log recommendations for this user after syncing")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main execution function."""
    args = parse_args(argv)

    logger.info("=" * 70)
    logger.info("SYNCING CASE CATALOG")
    logger.info("=" * 70)

    try:
        if args.csv is not None:
            cases_data = load_cases_from_csv(args.csv)
        else:
            cases_data = load_cases_from_api(
                backend_url=args.backend_url,
                batch_size=args.batch_size,
                max_cases=args.max_cases
            )
    except (FileNotFoundError, requests.RequestException) as e:
        logger.error(f"Failed to load cases: {e}")
        return 1

    service = RecommendationService()
    count = service.sync_catalog_to_db(cases_data)

    logger.info("\n" + "=" * 70)
    logger.info("SYNC COMPLETE")
    logger.info("=" * 70)
    logger.info(f"Cached cases: {count}")

    if args.preview_user:
        preview_recommendations(service, args.preview_user)

    return 0


if __name__ == "__main__":
    sys.exit(main())
