"""Keyword generation for product names that are already known.

Used in Firecrawl mode, where the crawl service supplies the product name and
the model only has to categorise it.  Failures never propagate: the product
name itself is mined for keywords instead.
"""

from __future__ import annotations

import logging
from typing import Callable

from pagecrawl import llm
from pagecrawl.config import Settings
from pagecrawl.errors import InvocationError, StructuredOutputError
from pagecrawl.extraction.parser import find_json_array
from pagecrawl.extraction.prompts import build_keyword_prompt

logger = logging.getLogger(__name__)

MAX_KEYWORDS = 10
FALLBACK_KEYWORDS = 5
_MIN_FALLBACK_WORD = 4


def fallback_keywords(product_name: str) -> str:
    """Return up to five lowercase words (4+ chars) of *product_name*."""
    words = [w for w in product_name.lower().split() if len(w) >= _MIN_FALLBACK_WORD]
    return ", ".join(words[:FALLBACK_KEYWORDS])


def generate_keywords(
    product_name: str,
    description: str,
    settings: Settings,
    *,
    complete: Callable[..., str] = llm.complete,
) -> str:
    """Return comma-separated categorisation keywords for a product."""
    prompt = build_keyword_prompt(product_name, description)
    try:
        completion = complete(
            prompt,
            settings,
            num_predict=settings.keyword_num_predict,
            timeout=settings.keyword_timeout,
        )
        decoded = find_json_array(completion)
    except (InvocationError, StructuredOutputError) as exc:
        logger.warning("Keyword generation failed for %r: %s", product_name, exc)
        return fallback_keywords(product_name)

    keywords = [str(k).strip().lower() for k in decoded if isinstance(k, (str, int, float))]
    keywords = [k for k in keywords if k][:MAX_KEYWORDS]
    if not keywords:
        logger.warning("Model returned no keywords for %r", product_name)
        return fallback_keywords(product_name)
    return ", ".join(keywords)
