"""HTTP fetcher with optional Playwright fallback for JS-rendered pages."""

from __future__ import annotations

import logging
import re

import httpx

from pagecrawl.config import Settings
from pagecrawl.errors import FetchError
from pagecrawl.scraper.models import RawPage

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# SPA / JS-rendered page detection heuristics
# ---------------------------------------------------------------------------
_SPA_PATTERNS = [
    re.compile(r'<div[^>]+id=["\'](?:root|app|__next)["\']', re.IGNORECASE),
    re.compile(r"window\.__NEXT_DATA__", re.IGNORECASE),
    re.compile(r"ng-version=", re.IGNORECASE),
    re.compile(r"data-reactroot", re.IGNORECASE),
]

_DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}


def _is_spa(html: str) -> bool:
    """Return ``True`` if *html* looks like a JavaScript SPA that needs rendering."""
    for pattern in _SPA_PATTERNS:
        if pattern.search(html):
            return True
    # Very little visible text relative to total HTML size.
    no_scripts = re.sub(r"<(script|style)[^>]*>.*?</(script|style)>", "", html, flags=re.IGNORECASE | re.DOTALL)
    stripped = re.sub(r"<[^>]+>", "", no_scripts).strip()
    if len(html) > 2000 and len(stripped) < 200:
        return True
    return False


def _fetch_with_playwright(url: str, settings: Settings) -> RawPage:
    """Render *url* with a headless Chromium browser and return its HTML.

    Playwright is imported lazily; without the ``browser`` extra the import
    raises :class:`ImportError` and :func:`fetch_url` keeps the static HTML.
    """
    from playwright.sync_api import Error as PlaywrightError  # noqa: PLC0415
    from playwright.sync_api import sync_playwright  # noqa: PLC0415

    try:
        with sync_playwright() as pw:
            browser = pw.chromium.launch(headless=True)
            try:
                page = browser.new_page()
                page.goto(
                    url,
                    timeout=int(settings.request_timeout * 1000),
                    wait_until="networkidle",
                )
                html = page.content()
            finally:
                browser.close()
    except PlaywrightError as exc:
        raise FetchError(url, f"browser rendering failed: {exc}") from exc

    return RawPage(url=url, html=html, status_code=200)


def fetch_url(url: str, settings: Settings) -> RawPage:
    """Fetch *url* and return a :class:`RawPage`.

    Uses ``httpx`` for standard pages.  Falls back to a headless Playwright
    browser when a JavaScript SPA fingerprint is detected in the initial
    response, or keeps that response when Playwright is not installed.
    Politeness delays are the caller's job.

    Raises:
        FetchError: On a transport error, timeout, or 4xx/5xx status code.
    """
    try:
        with httpx.Client(
            headers=_DEFAULT_HEADERS,
            timeout=settings.request_timeout,
            follow_redirects=True,
            max_redirects=settings.max_redirects,
        ) as client:
            response = client.get(url)
            response.raise_for_status()
            html = response.text
            status_code = response.status_code
    except httpx.HTTPStatusError as exc:
        raise FetchError(url, f"HTTP {exc.response.status_code}") from exc
    except httpx.HTTPError as exc:
        raise FetchError(url, str(exc) or type(exc).__name__) from exc

    raw = RawPage(url=url, html=html, status_code=status_code)

    if _is_spa(raw.html):
        logger.info("SPA fingerprint detected for %s, rendering with Playwright", url)
        try:
            raw = _fetch_with_playwright(url, settings)
        except ImportError:
            logger.warning(
                "Playwright is not installed (pip install 'product-crawler[browser]'); "
                "using the static HTML of %s",
                url,
            )

    return raw
