"""Extraction invoker: one model completion per normalised page."""

from __future__ import annotations

from pagecrawl import llm
from pagecrawl.config import Settings
from pagecrawl.extraction.prompts import build_extraction_prompt
from pagecrawl.models import PageContent


def invoke_extraction(page: PageContent, settings: Settings) -> str:
    """Ask the model for the products/articles on *page* and return the raw reply.

    Raises:
        InvocationError: If the completion request fails or times out.
    """
    prompt = build_extraction_prompt(page)
    return llm.complete(
        prompt,
        settings,
        num_predict=settings.extraction_num_predict,
        timeout=settings.extraction_timeout,
    )
