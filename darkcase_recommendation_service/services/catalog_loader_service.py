"""Service to load the case catalog from the platform backend"""
from typing import List, Dict, Optional
import time
import logging
import requests

from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from darkcase_recommendation_service.config import get_backend_api_url

logger = logging.getLogger(__name__)


class CaseDataLoader:
    """Service to load cases from the platform backend API."""

    def __init__(self, backend_api_url: Optional[str] = None):
        # Default to localhost for development
        self.backend_api_url = (backend_api_url or get_backend_api_url()).rstrip('/')

        # Configure session with retries
        self.session = requests.Session()
        retry_strategy = Retry(
            total=3,
            backoff_factor=1,
            status_forcelist=[429, 500, 502, 503, 504]
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        # noinspection HttpUrlsUsage
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    def get_cases_page(self, page: int = 1, limit: int = 100) -> Dict:
        """
        Fetch one page of cases.

        Returns:
            {
                "data": [...],
                "pagination": {"page": 1, "limit": 100, "total": 345, "totalPages": 4}
            }
        """
        url = f"{self.backend_api_url}/cases"
        params = {'page': page, 'limit': limit}
        response = self.session.get(url, params=params, timeout=10)
        response.raise_for_status()
        body = response.json()
        if isinstance(body, list):
            return {'data': body, 'pagination': None}
        return body

    def get_all_cases(self, batch_size: int = 100, max_cases: Optional[int] = None) -> List[Dict]:
        """
        Fetch all cases using pagination.

        Args:
            batch_size: Number of cases per request
            max_cases: Optional limit on total cases to fetch (for testing)

        Returns:
            List of case dictionaries
        """
        all_cases: List[Dict] = []
        page = 1

        logger.info(f"Fetching all cases (batch size: {batch_size})...")

        while True:
            if max_cases and len(all_cases) >= max_cases:
                logger.info(f"Reached max_cases limit: {max_cases}")
                break

            result = self.get_cases_page(page=page, limit=batch_size)
            cases = result.get('data') or []

            if not cases:
                break

            all_cases.extend(cases)
            logger.info(f"  Loaded {len(all_cases)} cases...")

            pagination = result.get('pagination') or {}
            total_pages = pagination.get('totalPages')
            if total_pages is not None and page >= total_pages:
                break
            if len(cases) < batch_size:
                break

            page += 1
            time.sleep(0.1)  # Rate limiting

        if max_cases:
            all_cases = all_cases[:max_cases]

        logger.info(f"✓ Loaded {len(all_cases)} total cases")
        return all_cases
