"""Product-name validation: real content item vs. placeholder or label artifact."""

from __future__ import annotations

import re
from typing import Optional

MIN_NAME_LENGTH = 3

# Each pattern is matched against the whole trimmed name, case-insensitively.
PLACEHOLDER_PATTERNS = [
    # Generic enumerations
    re.compile(r"product\s+\d+", re.IGNORECASE),
    re.compile(r"item\s+\d+", re.IGNORECASE),
    re.compile(r"article\s+\d+", re.IGNORECASE),
    # Explicit non-identification markers
    re.compile(r"\(not identified.*", re.IGNORECASE | re.DOTALL),
    re.compile(r"name missing.*", re.IGNORECASE | re.DOTALL),
    re.compile(r"unnamed.*", re.IGNORECASE | re.DOTALL),
    re.compile(r"unknown.*", re.IGNORECASE | re.DOTALL),
    # Filler tokens
    re.compile(r"n/a", re.IGNORECASE),
    re.compile(r"tbd", re.IGNORECASE),
    re.compile(r"pending", re.IGNORECASE),
    # Values copied from the prompt's worked example
    re.compile(r"product/articlename\d*", re.IGNORECASE),
    re.compile(r"keyword\d+", re.IGNORECASE),
]


def is_valid_product_name(name: Optional[str]) -> bool:
    """Return ``True`` if *name* looks like a genuine product or article name."""
    if not name:
        return False
    trimmed = name.strip()
    if len(trimmed) < MIN_NAME_LENGTH:
        return False
    return not any(pattern.fullmatch(trimmed) for pattern in PLACEHOLDER_PATTERNS)
