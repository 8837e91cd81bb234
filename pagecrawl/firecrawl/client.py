"""Firecrawl v2 REST client (crawl jobs only).

Requires ``FIRECRAWL_API_KEY``.  Every transport error, non-2xx status or
malformed body is raised as :class:`~pagecrawl.errors.FetchError` so the
poller can tell a flaky status check from a failed job.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from pagecrawl.config import Settings
from pagecrawl.errors import FetchError
from pagecrawl.models import CrawlJob, JobStatus

logger = logging.getLogger(__name__)

# Crawl scope: product detail pages only, no paginated/sorted/filtered listings.
INCLUDE_PATHS = ["products/.+"]
EXCLUDE_PATHS = [r"\?page=.+", r"\?sort=.+", r"\?filter=.+"]
CACHE_MAX_AGE_MS = 2 * 24 * 60 * 60 * 1000

PRODUCT_SCHEMA = {
    "type": "object",
    "required": [],
    "properties": {"product_name": {"type": "string"}},
}
PRODUCT_PROMPT = "Extract the name of the product this page is selling"


def crawl_options(settings: Settings) -> dict[str, Any]:
    """Return the crawl request options (everything except the URL)."""
    return {
        "sitemap": "include",
        "crawlEntireDomain": False,
        "limit": settings.firecrawl_page_limit,
        "includePaths": INCLUDE_PATHS,
        "excludePaths": EXCLUDE_PATHS,
        "scrapeOptions": {
            "onlyMainContent": False,
            "maxAge": CACHE_MAX_AGE_MS,
            "parsers": ["pdf"],
            "formats": [
                {"type": "json", "schema": PRODUCT_SCHEMA, "prompt": PRODUCT_PROMPT},
            ],
        },
    }


class FirecrawlClient:
    """Starts crawl jobs and reads their status."""

    def __init__(self, api_key: str, base_url: str = "https://api.firecrawl.dev", timeout: float = 30.0) -> None:
        if not api_key:
            raise EnvironmentError(
                "FIRECRAWL_API_KEY environment variable is not set. "
                "Set it or use --mode direct."
            )
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    @classmethod
    def from_settings(cls, settings: Settings) -> "FirecrawlClient":
        return cls(
            api_key=settings.firecrawl_api_key,
            base_url=settings.firecrawl_base_url,
            timeout=settings.firecrawl_timeout,
        )

    def _request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            with httpx.Client(headers=self._headers, timeout=self._timeout) as client:
                response = client.request(method, url, **kwargs)
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPStatusError as exc:
            raise FetchError(url, f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise FetchError(url, str(exc) or type(exc).__name__) from exc
        except ValueError as exc:
            raise FetchError(url, "response is not valid JSON") from exc

        if not isinstance(body, dict):
            raise FetchError(url, "response is not a JSON object")
        return body

    def start_crawl(self, url: str, options: dict[str, Any]) -> str:
        """Start a crawl of *url* and return the job id."""
        body = self._request("POST", f"{self._base_url}/v2/crawl", json={"url": url, **options})
        job_id = body.get("id")
        if not job_id:
            raise FetchError(url, f"crawl was not started: {body.get('error', 'no job id returned')}")
        logger.info("Started crawl job %s for %s", job_id, url)
        return str(job_id)

    def get_crawl_status(self, job_id: str) -> CrawlJob:
        """Return the current state of crawl job *job_id*.

        A completed job's data may be split across pages; every ``next``
        page is fetched and its items appended.
        """
        job = self._parse_job(job_id, self._request("GET", f"{self._base_url}/v2/crawl/{job_id}"))

        while job.status is JobStatus.COMPLETED and job.next_url:
            page = self._parse_job(job_id, self._request("GET", job.next_url))
            job = job.model_copy(update={"data": job.data + page.data, "next_url": page.next_url})
        return job

    @staticmethod
    def _parse_job(job_id: str, body: dict[str, Any]) -> CrawlJob:
        try:
            return CrawlJob.model_validate(
                {
                    "id": job_id,
                    "status": body.get("status"),
                    "data": body.get("data"),
                    "next_url": body.get("next"),
                }
            )
        except ValidationError as exc:
            raise FetchError(job_id, f"unexpected crawl status payload: {exc}") from exc
