"""Readers for the page items returned by a completed crawl job."""

from __future__ import annotations

from typing import Any, Optional


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def item_product_name(item: dict) -> Optional[str]:
    """Return the product name of a crawled page, or ``None``.

    Prefers the schema-extracted ``json.product_name``, then the page title,
    then its ``og:title``.
    """
    extracted = item.get("json") or {}
    metadata = item.get("metadata") or {}
    if isinstance(extracted, dict):
        name = _text(extracted.get("product_name"))
        if name:
            return name
    if isinstance(metadata, dict):
        return _text(metadata.get("title")) or _text(metadata.get("ogTitle"))
    return None


def item_description(item: dict) -> str:
    metadata = item.get("metadata") or {}
    if not isinstance(metadata, dict):
        return ""
    return _text(metadata.get("description")) or _text(metadata.get("ogDescription")) or ""
