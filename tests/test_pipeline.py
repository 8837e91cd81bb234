"""End-to-end tests for the per-source pipeline loop.

Fetching and model calls are patched at the ``pagecrawl.pipeline`` seam; the
parser, validator, retry controller, poller and report run for real.  The
SPA test goes through the real fetcher with ``respx`` instead.
"""

from __future__ import annotations

import logging
import sys
from typing import Dict
from unittest.mock import MagicMock, patch

import httpx
import pytest
import respx

from pagecrawl.config import Settings
from pagecrawl.errors import FetchError
from pagecrawl.models import AcquisitionMode, CrawlJob, PageContent
from pagecrawl.pipeline import read_sources, run_pipeline
from pagecrawl.report import records_to_csv
from pagecrawl.scraper.models import RawPage

GOOD = "https://good.example.com"
EMPTY = "https://empty.example.com"
DOWN = "https://down.example.com"

_HTML = "<html><head><title>{0}</title></head><body><main>{0} catalogue</main></body></html>"

REPLIES: Dict[str, str] = {
    GOOD: 'Here you go: [{"name": "Cordless Drill", "keywords": "tools, drill"}]',
    EMPTY: '[{"name": "Product 1", "keywords": "x"}]',
}


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        max_retries=5,
        retry_delay=1.0,
        source_delay=2.0,
        keyword_delay=0.5,
        poll_max_attempts=5,
        poll_interval=10.0,
        output_dir=tmp_path,
    )


def _fake_fetch(url: str, settings: Settings) -> RawPage:
    if url == DOWN:
        raise FetchError(url, "HTTP 503")
    return RawPage(url=url, html=_HTML.format(url), status_code=200)


def _fake_invoke(page: PageContent, settings: Settings) -> str:
    return REPLIES[page.source_url]


# ---------------------------------------------------------------------------
# Direct mode
# ---------------------------------------------------------------------------

class TestDirectPipeline:
    def test_one_valid_one_exhausted(self, settings: Settings, caplog: pytest.LogCaptureFixture) -> None:
        sleep = MagicMock()
        invoke = MagicMock(side_effect=_fake_invoke)

        with patch("pagecrawl.pipeline.fetch_url", side_effect=_fake_fetch), \
                patch("pagecrawl.pipeline.invoke_extraction", invoke), \
                caplog.at_level(logging.INFO, logger="pagecrawl"):
            summary = run_pipeline([GOOD, EMPTY], settings, sleep=sleep)

        assert [r.product_name for r in summary.records] == ["Cordless Drill"]
        assert summary.succeeded == 1
        assert summary.empty == 1
        assert summary.failed == 0
        assert summary.processed == 2

        # 1 attempt for GOOD + 6 for EMPTY
        assert invoke.call_count == 7
        delays = [c.args[0] for c in sleep.call_args_list]
        assert delays.count(1.0) == 5
        assert delays.count(2.0) == 1

        rows = records_to_csv(summary.records).splitlines()
        assert rows == [
            "URL,Product Name,Keywords",
            '"https://good.example.com","Cordless Drill","tools, drill"',
        ]
        assert GOOD in caplog.text
        assert EMPTY in caplog.text

    def test_fetch_failure_does_not_stop_loop(self, settings: Settings) -> None:
        sleep = MagicMock()
        with patch("pagecrawl.pipeline.fetch_url", side_effect=_fake_fetch), \
                patch("pagecrawl.pipeline.invoke_extraction", side_effect=_fake_invoke):
            summary = run_pipeline([DOWN, GOOD], settings, sleep=sleep)

        assert summary.failed == 1
        assert summary.succeeded == 1
        assert len(summary.records) == 1
        sleep.assert_called_once_with(2.0)

    def test_spa_source_without_playwright_does_not_abort_run(self, settings: Settings) -> None:
        spa = "https://spa.example.com"
        spa_html = '<html><body><div id="__next"><main>Garden Hose 20m</main></div></body></html>'
        replies = {spa: '[{"name": "Garden Hose"}]', GOOD: REPLIES[GOOD]}

        with respx.mock, patch.dict(sys.modules, {"playwright": None, "playwright.sync_api": None}), \
                patch("pagecrawl.pipeline.invoke_extraction",
                      side_effect=lambda page, s: replies[page.source_url]):
            respx.get(spa).mock(return_value=httpx.Response(200, text=spa_html))
            respx.get(GOOD).mock(return_value=httpx.Response(200, text=_HTML.format(GOOD)))
            summary = run_pipeline([spa, GOOD], settings, sleep=MagicMock())

        assert summary.failed == 0
        assert summary.succeeded == 2
        assert [r.product_name for r in summary.records] == ["Garden Hose", "Cordless Drill"]

    def test_records_keep_source_order(self, settings: Settings) -> None:
        replies = {
            "https://b.com": '[{"name": "Zeta Lamp"}]',
            "https://a.com": '[{"name": "Alpha Chair"}, {"name": "Alpha Desk"}]',
        }
        with patch("pagecrawl.pipeline.fetch_url", side_effect=_fake_fetch), \
                patch("pagecrawl.pipeline.invoke_extraction",
                      side_effect=lambda page, s: replies[page.source_url]):
            summary = run_pipeline(["https://b.com", "https://a.com"], settings, sleep=MagicMock())

        assert [(r.source_url, r.product_name) for r in summary.records] == [
            ("https://b.com", "Zeta Lamp"),
            ("https://a.com", "Alpha Chair"),
            ("https://a.com", "Alpha Desk"),
        ]

    def test_no_sources(self, settings: Settings) -> None:
        sleep = MagicMock()
        summary = run_pipeline([], settings, sleep=sleep)
        assert summary.records == []
        assert summary.processed == 0
        sleep.assert_not_called()


# ---------------------------------------------------------------------------
# Firecrawl mode
# ---------------------------------------------------------------------------

class _FakeCrawlService:
    def __init__(self, statuses: list) -> None:
        self._statuses = statuses
        self.status_calls = 0
        self.started: list = []

    def start_crawl(self, url: str, options: dict) -> str:
        self.started.append((url, options))
        return "job-1"

    def get_crawl_status(self, job_id: str) -> CrawlJob:
        status = self._statuses[min(self.status_calls, len(self._statuses) - 1)]
        self.status_calls += 1
        return status


class TestFirecrawlPipeline:
    def test_completed_job_yields_validated_records(self, settings: Settings) -> None:
        items = [
            {"json": {"product_name": "Cordless Drill"}, "metadata": {"description": "18V"}},
            {"json": {"product_name": "Product 2"}},
            {"metadata": {"title": "Work Gloves"}},
            {"metadata": {}},
        ]
        service = _FakeCrawlService([
            CrawlJob(id="job-1", status="scraping"),
            CrawlJob(id="job-1", status="completed", data=items),
        ])
        sleep = MagicMock()

        with patch("pagecrawl.pipeline.generate_keywords", return_value="tools") as keywords:
            summary = run_pipeline(
                [GOOD], settings, AcquisitionMode.FIRECRAWL, client=service, sleep=sleep
            )

        assert [r.product_name for r in summary.records] == ["Cordless Drill", "Work Gloves"]
        assert all(r.source_url == GOOD for r in summary.records)
        assert keywords.call_args_list[0].args[:2] == ("Cordless Drill", "18V")
        assert service.status_calls == 2
        assert service.started[0][1]["limit"] == settings.firecrawl_page_limit
        delays = [c.args[0] for c in sleep.call_args_list]
        assert delays == [10.0, 0.5, 0.5]

    def test_failed_and_timed_out_jobs_are_counted(self, settings: Settings) -> None:
        failing = _FakeCrawlService([CrawlJob(id="job-1", status="failed")])
        stuck = _FakeCrawlService([CrawlJob(id="job-1", status="scraping")])

        summary_failed = run_pipeline([GOOD], settings, AcquisitionMode.FIRECRAWL,
                                      client=failing, sleep=MagicMock())
        summary_stuck = run_pipeline([GOOD], settings, AcquisitionMode.FIRECRAWL,
                                     client=stuck, sleep=MagicMock())

        assert summary_failed.failed == 1
        assert summary_stuck.failed == 1
        assert stuck.status_calls == settings.poll_max_attempts

    def test_missing_api_key_is_fatal(self, settings: Settings) -> None:
        settings.firecrawl_api_key = ""
        with pytest.raises(EnvironmentError):
            run_pipeline([GOOD], settings, AcquisitionMode.FIRECRAWL, sleep=MagicMock())


class TestReadSources:
    def test_skips_blanks_and_comments(self) -> None:
        lines = ["https://a.com", "", "  # disabled", "  https://b.com  "]
        assert read_sources(lines) == ["https://a.com", "https://b.com"]
