"""Tests for the retry controller around invoke → parse → validate.

The invoker is a plain callable, so each test scripts the model's replies in
a list and counts calls.  ``sleep`` is a ``MagicMock``; no test waits.
"""

from __future__ import annotations

import logging
from typing import List, Union
from unittest.mock import MagicMock

import pytest

from pagecrawl.errors import InvocationError
from pagecrawl.extraction.retry import extract_with_retry
from pagecrawl.models import PageContent, ValidatedRecord

PAGE = PageContent(source_url="https://shop.example.com", title="Shop", excerpt="Cordless Drill $99")

VALID = '[{"name": "Cordless Drill", "keywords": "tools, drill"}]'
PLACEHOLDERS = '[{"name": "Product 1", "keywords": "a"}, {"name": "unnamed", "keywords": "b"}]'


def _scripted(replies: List[Union[str, Exception]]):
    """Return an invoker that yields *replies* in order (exceptions are raised)."""
    calls = {"count": 0}

    def invoke(page: PageContent) -> str:
        assert page is PAGE
        reply = replies[min(calls["count"], len(replies) - 1)]
        calls["count"] += 1
        if isinstance(reply, Exception):
            raise reply
        return reply

    return invoke, calls


class TestExtractWithRetry:
    def test_first_attempt_success(self) -> None:
        invoke, calls = _scripted([VALID])
        sleep = MagicMock()

        records = extract_with_retry(PAGE, invoke=invoke, sleep=sleep)

        assert records == [
            ValidatedRecord("https://shop.example.com", "Cordless Drill", "tools, drill")
        ]
        assert calls["count"] == 1
        sleep.assert_not_called()

    def test_always_empty_exhausts_budget(self) -> None:
        invoke, calls = _scripted([PLACEHOLDERS])
        sleep = MagicMock()

        records = extract_with_retry(PAGE, invoke=invoke, max_retries=5, retry_delay=1.0, sleep=sleep)

        assert records == []
        assert calls["count"] == 6
        assert sleep.call_count == 5
        sleep.assert_called_with(1.0)

    def test_success_on_third_attempt_stops(self) -> None:
        invoke, calls = _scripted(["no json here", PLACEHOLDERS, VALID, VALID])
        sleep = MagicMock()

        records = extract_with_retry(PAGE, invoke=invoke, max_retries=5, sleep=sleep)

        assert [r.product_name for r in records] == ["Cordless Drill"]
        assert calls["count"] == 3
        assert sleep.call_count == 2

    def test_invocation_errors_are_retried(self) -> None:
        invoke, calls = _scripted([InvocationError("timeout"), InvocationError("timeout"), VALID])

        records = extract_with_retry(PAGE, invoke=invoke, sleep=MagicMock())

        assert len(records) == 1
        assert calls["count"] == 3

    def test_persistent_errors_return_empty(self) -> None:
        invoke, calls = _scripted([InvocationError("connection refused")])

        records = extract_with_retry(PAGE, invoke=invoke, max_retries=2, sleep=MagicMock())

        assert records == []
        assert calls["count"] == 3

    def test_decode_errors_are_retried(self) -> None:
        invoke, calls = _scripted(["[{'name': 'Drill'}]", VALID])

        records = extract_with_retry(PAGE, invoke=invoke, sleep=MagicMock())

        assert len(records) == 1
        assert calls["count"] == 2

    def test_zero_retries_means_single_attempt(self) -> None:
        invoke, calls = _scripted([PLACEHOLDERS])
        sleep = MagicMock()

        assert extract_with_retry(PAGE, invoke=invoke, max_retries=0, sleep=sleep) == []
        assert calls["count"] == 1
        sleep.assert_not_called()

    def test_only_valid_candidates_survive(self) -> None:
        reply = (
            '[{"name": "Item 4", "keywords": "x"},'
            ' {"name": "Garden Hose", "keywords": "garden"},'
            ' {"name": "TBD", "keywords": "y"}]'
        )
        invoke, _ = _scripted([reply])

        records = extract_with_retry(PAGE, invoke=invoke, sleep=MagicMock())

        assert [r.product_name for r in records] == ["Garden Hose"]

    def test_exhaustion_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        invoke, _ = _scripted([PLACEHOLDERS])

        with caplog.at_level(logging.WARNING, logger="pagecrawl.extraction.retry"):
            extract_with_retry(PAGE, invoke=invoke, max_retries=1, sleep=MagicMock())

        assert "after 2 attempts" in caplog.text

    def test_decode_failure_on_final_attempt_logs_excerpt(self, caplog: pytest.LogCaptureFixture) -> None:
        bad = "Products: [{'name': 'Mitre Saw'}]"
        invoke, calls = _scripted([bad])
        sleep = MagicMock()

        with caplog.at_level(logging.WARNING, logger="pagecrawl.extraction.retry"):
            records = extract_with_retry(PAGE, invoke=invoke, max_retries=1, sleep=sleep)

        assert records == []
        assert calls["count"] == 2
        sleep.assert_called_once_with(1.0)
        attempt_lines = [r.getMessage() for r in caplog.records if "attempt 2/2" in r.getMessage()]
        assert attempt_lines and "Mitre Saw" in attempt_lines[0]
        final = caplog.records[-1].getMessage()
        assert "after 2 attempts" in final
        assert "Invalid JSON" in final
        assert "Mitre Saw" in final

    def test_missing_payload_on_final_attempt(self, caplog: pytest.LogCaptureFixture) -> None:
        invoke, calls = _scripted([InvocationError("timeout"), "Sorry, I found nothing."])

        with caplog.at_level(logging.WARNING, logger="pagecrawl.extraction.retry"):
            records = extract_with_retry(PAGE, invoke=invoke, max_retries=1, sleep=MagicMock())

        assert records == []
        assert calls["count"] == 2
        final = caplog.records[-1].getMessage()
        assert "No JSON array found" in final
        assert "Sorry, I found nothing." in final

    def test_unexpected_errors_propagate(self) -> None:
        invoke, _ = _scripted([RuntimeError("bug")])

        with pytest.raises(RuntimeError):
            extract_with_retry(PAGE, invoke=invoke, sleep=MagicMock())
