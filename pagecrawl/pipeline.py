"""The per-source crawl loop.

Sources are processed strictly one at a time with a politeness delay in
between.  Acquisition errors (:class:`FetchError`, :class:`JobError`) are
logged and counted per source; the loop always moves on to the next one.
The returned :class:`RunSummary` holds the aggregated records in source
order; writing the report is the caller's job.

Public functions
----------------
``process_direct_source``    fetch, normalise, extract with retries.
``process_firecrawl_source`` crawl job, poll, keyword generation.
``run_pipeline``             run either of the above over all sources.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Iterable, List, Optional, Sequence

from pagecrawl.config import Settings
from pagecrawl.errors import CrawlerError
from pagecrawl.extraction.invoker import invoke_extraction
from pagecrawl.extraction.keywords import generate_keywords
from pagecrawl.extraction.retry import extract_with_retry
from pagecrawl.extraction.validator import is_valid_product_name
from pagecrawl.firecrawl.client import FirecrawlClient, crawl_options
from pagecrawl.firecrawl.items import item_description, item_product_name
from pagecrawl.firecrawl.poller import wait_for_job
from pagecrawl.models import (
    AcquisitionMode,
    ExtractionCandidate,
    RunSummary,
    ValidatedRecord,
)
from pagecrawl.scraper.fetcher import fetch_url
from pagecrawl.scraper.normalizer import normalize_page

logger = logging.getLogger(__name__)

Sleep = Callable[[float], None]


def process_direct_source(
    url: str,
    settings: Settings,
    *,
    sleep: Sleep = time.sleep,
) -> List[ValidatedRecord]:
    """Fetch *url* and let the model extract its products.

    Raises:
        FetchError: If the page cannot be fetched.
    """
    raw = fetch_url(url, settings)
    page = normalize_page(raw, max_chars=settings.excerpt_chars)
    logger.info("Processing %s with the LLM (%d chars of content)", url, len(page.excerpt))
    return extract_with_retry(
        page,
        invoke=lambda p: invoke_extraction(p, settings),
        max_retries=settings.max_retries,
        retry_delay=settings.retry_delay,
        sleep=sleep,
    )


def process_firecrawl_source(
    url: str,
    settings: Settings,
    client: FirecrawlClient,
    *,
    sleep: Sleep = time.sleep,
) -> List[ValidatedRecord]:
    """Crawl *url*'s product pages remotely and generate keywords for each.

    Raises:
        FetchError: If the job cannot be started.
        JobFailed: If the crawl service reports the job as failed.
        JobTimeout: If the job does not finish within the polling budget.
    """
    job_id = client.start_crawl(url, crawl_options(settings))
    logger.info("Waiting for crawl job %s to complete", job_id)
    items = wait_for_job(
        client,
        job_id,
        max_attempts=settings.poll_max_attempts,
        interval=settings.poll_interval,
        sleep=sleep,
    )
    logger.info("Processing %d page(s) from crawl job %s", len(items), job_id)

    records: List[ValidatedRecord] = []
    for item in items:
        name = item_product_name(item)
        if not is_valid_product_name(name):
            logger.debug("Skipping crawled page without a usable product name: %r", name)
            continue

        logger.info("Generating keywords for %r", name)
        keywords = generate_keywords(name, item_description(item), settings)
        candidate = ExtractionCandidate(name=name, keywords=keywords)
        records.append(ValidatedRecord.from_candidate(url, candidate))
        sleep(settings.keyword_delay)

    return records


def run_pipeline(
    sources: Sequence[str],
    settings: Settings,
    mode: AcquisitionMode = AcquisitionMode.DIRECT,
    *,
    client: Optional[FirecrawlClient] = None,
    sleep: Sleep = time.sleep,
) -> RunSummary:
    """Process every source in order and aggregate the validated records.

    Args:
        sources: Landing-page URLs.
        settings: Pipeline configuration.
        mode: ``direct`` fetches pages itself; ``firecrawl`` delegates
            acquisition to a remote crawl job.
        client: Crawl-service client; built from *settings* in firecrawl
            mode when omitted.
        sleep: Delay function used for every scheduled wait.

    Raises:
        EnvironmentError: In firecrawl mode without an API key.
    """
    if mode is AcquisitionMode.FIRECRAWL and client is None:
        client = FirecrawlClient.from_settings(settings)

    summary = RunSummary()
    total = len(sources)

    for index, url in enumerate(sources, start=1):
        logger.info("[%d/%d] Crawling %s", index, total, url)
        try:
            if mode is AcquisitionMode.FIRECRAWL:
                records = process_firecrawl_source(url, settings, client, sleep=sleep)
            else:
                records = process_direct_source(url, settings, sleep=sleep)
        except CrawlerError as exc:
            logger.error("[%d/%d] %s failed: %s", index, total, url, exc)
            summary.failed += 1
        else:
            summary.records.extend(records)
            if records:
                summary.succeeded += 1
                logger.info("[%d/%d] Extracted %d product(s) from %s", index, total, len(records), url)
            else:
                summary.empty += 1
                logger.warning("[%d/%d] No products extracted from %s", index, total, url)

        if index < total:
            sleep(settings.source_delay)

    return summary


def read_sources(lines: Iterable[str]) -> List[str]:
    """Return the URLs in *lines*, skipping blanks and ``#`` comments."""
    sources: List[str] = []
    for line in lines:
        stripped = line.strip()
        if stripped and not stripped.startswith("#"):
            sources.append(stripped)
    return sources
