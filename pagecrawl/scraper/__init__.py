"""Scraper package: page fetch & content normalisation."""

from pagecrawl.scraper.fetcher import fetch_url
from pagecrawl.scraper.models import RawPage
from pagecrawl.scraper.normalizer import normalize_page

__all__ = ["fetch_url", "normalize_page", "RawPage"]
