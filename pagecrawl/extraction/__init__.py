"""Extraction package: prompt, invoke, parse, validate, retry."""

from pagecrawl.extraction.invoker import invoke_extraction
from pagecrawl.extraction.keywords import generate_keywords
from pagecrawl.extraction.parser import find_json_array, parse_candidates
from pagecrawl.extraction.retry import extract_with_retry
from pagecrawl.extraction.validator import is_valid_product_name

__all__ = [
    "invoke_extraction",
    "generate_keywords",
    "find_json_array",
    "parse_candidates",
    "extract_with_retry",
    "is_valid_product_name",
]
