"""Data models for the crawler pipeline.

Pipeline-internal values (:class:`PageContent`, :class:`ValidatedRecord`) are
frozen dataclasses.  Anything decoded from an untrusted remote payload (model
output, crawl-service responses) goes through a pydantic model first so the
rest of the code never inspects ad hoc dict shapes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class AcquisitionMode(str, Enum):
    """How raw page data is obtained for a source."""

    DIRECT = "direct"
    FIRECRAWL = "firecrawl"


@dataclass(frozen=True)
class PageContent:
    """A normalised landing page, ready to be put into a prompt."""

    source_url: str
    title: str
    excerpt: str


class ExtractionCandidate(BaseModel):
    """A ``{name, keywords}`` object proposed by the model.  Not yet trusted."""

    model_config = ConfigDict(extra="ignore")

    name: str
    keywords: str = ""

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_name(cls, value: Any) -> str:
        if value is None:
            raise ValueError("name is missing")
        if isinstance(value, (dict, list)):
            raise ValueError("name must be a scalar")
        return str(value).strip()

    @field_validator("keywords", mode="before")
    @classmethod
    def _coerce_keywords(cls, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, list):
            return ", ".join(str(k).strip() for k in value if str(k).strip())
        return str(value).strip()


@dataclass(frozen=True)
class ValidatedRecord:
    """A candidate that passed validation; one row of the final report."""

    source_url: str
    product_name: str
    keywords: str

    @classmethod
    def from_candidate(cls, source_url: str, candidate: ExtractionCandidate) -> "ValidatedRecord":
        """Build a record, re-checking *candidate* against the validator.

        Raises:
            ValueError: If the candidate name is a placeholder or too short.
        """
        # The extraction package imports this module on load.
        from pagecrawl.extraction.validator import is_valid_product_name  # noqa: PLC0415

        if not is_valid_product_name(candidate.name):
            raise ValueError(f"Rejected product name: {candidate.name!r}")
        return cls(
            source_url=source_url,
            product_name=candidate.name.strip(),
            keywords=candidate.keywords,
        )


class JobStatus(str, Enum):
    """Lifecycle of a remote crawl job.

    The crawl service never reports ``TIMED_OUT``: it is the local verdict
    once the polling budget runs out, and the poller surfaces it by raising
    :class:`~pagecrawl.errors.JobTimeout` rather than by returning a job.
    """

    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"

    @property
    def is_terminal(self) -> bool:
        """``True`` once no further status change is expected."""
        return self in (JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.TIMED_OUT)

    @classmethod
    def from_remote(cls, value: Optional[str]) -> "JobStatus":
        """Map a crawl-service status string onto a :class:`JobStatus`.

        Unknown values are treated as still running.
        """
        return _REMOTE_STATUS.get((value or "").strip().lower(), cls.PROCESSING)


_REMOTE_STATUS = {
    "queued": JobStatus.QUEUED,
    "pending": JobStatus.QUEUED,
    "scraping": JobStatus.PROCESSING,
    "processing": JobStatus.PROCESSING,
    "active": JobStatus.PROCESSING,
    "completed": JobStatus.COMPLETED,
    "failed": JobStatus.FAILED,
    "cancelled": JobStatus.FAILED,
}


class CrawlJob(BaseModel):
    """Snapshot of a remote crawl job, as returned by one status request."""

    model_config = ConfigDict(extra="ignore")

    id: str
    status: JobStatus = JobStatus.QUEUED
    data: List[dict] = []
    next_url: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def _map_status(cls, value: Any) -> JobStatus:
        if isinstance(value, JobStatus):
            return value
        return JobStatus.from_remote(value)

    @field_validator("data", mode="before")
    @classmethod
    def _only_objects(cls, value: Any) -> list:
        if not value:
            return []
        return [item for item in value if isinstance(item, dict)]

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


@dataclass
class RunSummary:
    """Outcome of one pipeline run.

    ``succeeded`` sources yielded records, ``empty`` ones were processed but
    yielded none, ``failed`` ones could not be acquired.
    """

    records: List[ValidatedRecord] = field(default_factory=list)
    succeeded: int = 0
    failed: int = 0
    empty: int = 0

    @property
    def processed(self) -> int:
        return self.succeeded + self.empty + self.failed
