"""Error taxonomy for the crawler pipeline.

``CrawlerError``
    Root of every error raised by this package.
``FetchError``
    Page or crawl-job transport failure.
``InvocationError``
    Language-model call failed or timed out.
``StructuredOutputError``
    Model output is unusable: ``NoStructuredPayload`` (no bracketed span) or
    ``DecodeError`` (span found but not valid JSON).
``ValidationExhausted``
    Model answered but every candidate was rejected.
``JobError``
    Remote crawl job ended badly: ``JobFailed`` or ``JobTimeout``.
"""

from __future__ import annotations

# Raw model output attached to structured-output errors is capped at this size.
_MAX_RAW_CHARS = 2000
_CONTEXT_CHARS = 100


class CrawlerError(Exception):
    """Base class for all crawler errors."""


class FetchError(CrawlerError):
    """Fetching a page or talking to the crawl service failed."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason


class InvocationError(CrawlerError):
    """The language-model completion request errored or timed out."""


class StructuredOutputError(CrawlerError):
    """Model output did not contain a decodable JSON array."""

    def __init__(self, message: str, text: str, position: int | None = None) -> None:
        super().__init__(message)
        self.text = text[:_MAX_RAW_CHARS]
        self.position = position
        # Cut from the full text: position may lie past the stored head.
        if position is None:
            self._excerpt = text[: 2 * _CONTEXT_CHARS]
        else:
            self._excerpt = text[max(0, position - _CONTEXT_CHARS): position + _CONTEXT_CHARS]

    def excerpt(self) -> str:
        """Return the part of the raw text around :attr:`position`.

        Without a position the head of the text is returned instead.
        """
        return self._excerpt


class NoStructuredPayload(StructuredOutputError):
    """No bracket-balanced ``[...]`` span was found in the model output."""


class DecodeError(StructuredOutputError):
    """A bracketed span was found but could not be decoded as JSON."""


class ValidationExhausted(CrawlerError):
    """The model answered but none of its candidates passed validation."""


class JobError(CrawlerError):
    """A remote crawl job did not complete successfully."""

    def __init__(self, job_id: str, message: str) -> None:
        super().__init__(message)
        self.job_id = job_id


class JobFailed(JobError):
    """The crawl service reported the job as failed."""

    def __init__(self, job_id: str) -> None:
        super().__init__(job_id, f"Crawl job {job_id} failed")


class JobTimeout(JobError):
    """The job was still running when the polling budget ran out."""

    def __init__(self, job_id: str, attempts: int, last_error: Exception | None = None) -> None:
        message = f"Crawl job {job_id} timed out after {attempts} status checks"
        if last_error is not None:
            message += f" (last error: {last_error})"
        super().__init__(job_id, message)
        self.attempts = attempts
        self.last_error = last_error
