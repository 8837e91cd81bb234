"""Retry controller around invoke → parse → validate.

A model that answers with nothing usable is treated the same as a model (or
transport) that fails: both are retried with the same input until the
attempt budget runs out, after which the source yields no records.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional

from pagecrawl.errors import (
    CrawlerError,
    InvocationError,
    StructuredOutputError,
    ValidationExhausted,
)
from pagecrawl.extraction.parser import parse_candidates
from pagecrawl.extraction.validator import is_valid_product_name
from pagecrawl.models import PageContent, ValidatedRecord

logger = logging.getLogger(__name__)

Invoker = Callable[[PageContent], str]


def _log_attempt_failure(exc: CrawlerError, attempt: int, total: int) -> None:
    if isinstance(exc, StructuredOutputError):
        logger.warning(
            "Extraction attempt %d/%d failed: %s; output near the problem: %r",
            attempt, total, exc, exc.excerpt(),
        )
    else:
        logger.warning("Extraction attempt %d/%d failed: %s", attempt, total, exc)


def extract_with_retry(
    page: PageContent,
    *,
    invoke: Invoker,
    max_retries: int = 5,
    retry_delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> List[ValidatedRecord]:
    """Return validated records for *page*, retrying up to *max_retries* times.

    Args:
        page: The normalised page, passed unchanged to every attempt.
        invoke: Produces a raw completion for *page*; may raise
            :class:`InvocationError`.
        max_retries: Extra attempts after the first one.
        retry_delay: Seconds to wait between attempts.
        sleep: Delay function (injectable for tests).

    Returns:
        The surviving records of the first attempt that has any, or ``[]``
        once every attempt has failed.  Never raises for model or transport
        failures.
    """
    total = max_retries + 1
    last_error: Optional[CrawlerError] = None

    for attempt in range(1, total + 1):
        try:
            completion = invoke(page)
            candidates = parse_candidates(completion)
        except (InvocationError, StructuredOutputError) as exc:
            last_error = exc
            _log_attempt_failure(exc, attempt, total)
        else:
            records = [
                ValidatedRecord.from_candidate(page.source_url, candidate)
                for candidate in candidates
                if is_valid_product_name(candidate.name)
            ]
            if records:
                logger.info(
                    "Found %d product(s) for %s on attempt %d/%d",
                    len(records), page.source_url, attempt, total,
                )
                return records
            rejected = [c.name for c in candidates]
            last_error = ValidationExhausted(
                f"No valid products among {len(candidates)} candidate(s): {rejected}"
            )
            _log_attempt_failure(last_error, attempt, total)

        if attempt < total:
            sleep(retry_delay)

    if isinstance(last_error, StructuredOutputError):
        logger.warning(
            "No valid products for %s after %d attempts (last error: %s; output near the problem: %r)",
            page.source_url, total, last_error, last_error.excerpt(),
        )
    else:
        logger.warning(
            "No valid products for %s after %d attempts (last error: %s)",
            page.source_url, total, last_error,
        )
    return []
