"""Content normalisation: turns a :class:`RawPage` into a :class:`PageContent`."""

from __future__ import annotations

import re

import trafilatura
from bs4 import BeautifulSoup

from pagecrawl.models import PageContent
from pagecrawl.scraper.models import RawPage

# Elements that never carry product or article names.
_NOISE_TAGS = ["script", "style", "nav", "footer", "noscript"]

# Preferred content containers, tried as one CSS selector group.
_CONTENT_SELECTOR = "main, [role='main'], .main-content, .content, article"

_WHITESPACE = re.compile(r"\s+")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _extract_title(html: str) -> str:
    """Return the text content of the first ``<title>`` tag, or empty string."""
    match = re.search(r"<title[^>]*>([^<]+)</title>", html, re.IGNORECASE)
    if match:
        return match.group(1).strip()
    return ""


def _metadata_title(html: str) -> str:
    """Fall back to trafilatura's metadata (``og:title`` etc.) for the title."""
    metadata = trafilatura.extract_metadata(html)
    if metadata is None or not metadata.title:
        return ""
    return metadata.title.strip()


def _visible_text(html: str) -> str:
    """Return the whitespace-collapsed text of the main content area.

    Falls back to ``<body>`` (or the whole document) when no content
    container is present.
    """
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(_NOISE_TAGS):
        tag.decompose()

    container = soup.select_one(_CONTENT_SELECTOR) or soup.body or soup
    text = container.get_text(separator=" ")
    return _WHITESPACE.sub(" ", text).strip()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def normalize_page(raw: RawPage, max_chars: int = 4000) -> PageContent:
    """Reduce *raw* to a title plus a plain-text excerpt of at most *max_chars*."""
    title = _extract_title(raw.html) or _metadata_title(raw.html)
    excerpt = _visible_text(raw.html)[:max_chars]
    return PageContent(source_url=raw.url, title=title, excerpt=excerpt)
