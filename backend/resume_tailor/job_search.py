"""
Job posting lookup against the JSearch API (RapidAPI).

Search results are advisory enrichment: ``search_or_empty`` logs failures and
returns an empty list so a tailoring request never fails because of them.
"""
from typing import Any, Dict, List, Optional
import logging

import httpx

from . import config
from .errors import JobSearchError

logger = logging.getLogger(__name__)


class JobSearchClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        host: Optional[str] = None,
        url: Optional[str] = None,
        timeout: float = 30.0,
    ):
        self.api_key = api_key or config.search_api_key()
        self.host = host or config.search_api_host()
        self.url = url or config.search_api_url()
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        return {"x-rapidapi-key": self.api_key or "", "x-rapidapi-host": self.host}

    async def search(self, query: str, page: int = 1) -> List[Dict[str, Any]]:
        """Fetch one page of postings. Raises ``JobSearchError`` on any failure."""
        if not self.api_key:
            raise JobSearchError("SEARCH_API_KEY not configured")

        params = {"query": query, "page": str(page), "num_pages": "1"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                r = await client.get(self.url, headers=self._headers(), params=params)
            r.raise_for_status()
            data = r.json()
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            raise JobSearchError(f"Job search request failed: {e!r}") from e

        jobs = data.get("data") if isinstance(data, dict) else None
        if not isinstance(jobs, list):
            return []
        return [j for j in jobs if isinstance(j, dict)]

    async def search_or_empty(self, query: str, page: int = 1) -> List[Dict[str, Any]]:
        try:
            return await self.search(query, page)
        except Exception as e:
            logger.error(f"Job search failed for query={query!r} page={page}: {e!r}")
            return []


def get_job_search_client() -> JobSearchClient:
    return JobSearchClient()
