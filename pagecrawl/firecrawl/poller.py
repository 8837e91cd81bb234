"""Job poller: drive a remote crawl job to a terminal state.

``QUEUED``/``PROCESSING`` keep polling, ``COMPLETED`` returns the job data,
``FAILED`` raises :class:`JobFailed`.  Running out of attempts while the job
is still running raises :class:`JobTimeout`.  A transport error on a single
status check is tolerated; only the last one is reported on timeout.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional, Protocol

from pagecrawl.errors import FetchError, JobFailed, JobTimeout
from pagecrawl.models import CrawlJob, JobStatus

logger = logging.getLogger(__name__)


class JobStatusSource(Protocol):
    def get_crawl_status(self, job_id: str) -> CrawlJob: ...


def wait_for_job(
    client: JobStatusSource,
    job_id: str,
    *,
    max_attempts: int = 60,
    interval: float = 10.0,
    sleep: Callable[[float], None] = time.sleep,
) -> List[dict]:
    """Poll *job_id* until it completes and return its data items.

    Raises:
        JobFailed: As soon as the job reports a failed status.
        JobTimeout: If the job is not terminal after *max_attempts* checks.
    """
    last_error: Optional[FetchError] = None

    for attempt in range(1, max_attempts + 1):
        try:
            job = client.get_crawl_status(job_id)
        except FetchError as exc:
            last_error = exc
            logger.warning(
                "Status check %d/%d for job %s failed: %s", attempt, max_attempts, job_id, exc
            )
        else:
            if job.status is JobStatus.COMPLETED:
                logger.info("Crawl job %s completed with %d page(s)", job_id, len(job.data))
                return job.data
            if job.status is JobStatus.FAILED:
                raise JobFailed(job_id)
            logger.debug("Crawl job %s is %s (check %d/%d)", job_id, job.status.value, attempt, max_attempts)

        if attempt < max_attempts:
            sleep(interval)

    raise JobTimeout(job_id, max_attempts, last_error) from last_error
