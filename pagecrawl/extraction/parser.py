"""Locate and decode the JSON array embedded in free-text model output.

Models tend to wrap the requested array in prose ("Here are the products:
[...] Let me know if ...") and nest objects and arrays inside it, so a
first-``[``-to-last-``]`` regex is not enough.  :func:`find_json_array` walks
the text tracking bracket depth and string literals instead.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Iterator, List, Tuple

from pydantic import ValidationError

from pagecrawl.errors import DecodeError, NoStructuredPayload
from pagecrawl.models import ExtractionCandidate

logger = logging.getLogger(__name__)

_OPENERS = {"[": "]", "{": "}"}
_CLOSERS = {"]", "}"}


def _balanced_end(text: str, start: int) -> int:
    """Return the index just past the span that closes ``text[start]``.

    Brackets inside JSON string literals are ignored.  Returns ``-1`` when
    the span never closes or a closer does not match its opener.
    """
    stack: List[str] = []
    in_string = False
    escaped = False

    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char in _OPENERS:
            stack.append(_OPENERS[char])
        elif char in _CLOSERS:
            if not stack or stack.pop() != char:
                return -1
            if not stack:
                return index + 1
    return -1


def _balanced_spans(text: str) -> Iterator[Tuple[int, int]]:
    """Yield ``(start, end)`` for each ``[`` that opens a balanced span."""
    start = text.find("[")
    while start != -1:
        end = _balanced_end(text, start)
        if end != -1:
            yield start, end
        start = text.find("[", start + 1)


def find_json_array(text: str) -> List[Any]:
    """Return the decoded contents of the first JSON array embedded in *text*.

    Raises:
        NoStructuredPayload: If *text* has no bracket-balanced ``[...]`` span.
        DecodeError: If balanced spans exist but none decodes to a JSON
            array.  Carries the decode position of the first span.
    """
    first_error: DecodeError | None = None

    for start, end in _balanced_spans(text):
        span = text[start:end]
        try:
            decoded = json.loads(span)
        except json.JSONDecodeError as exc:
            if first_error is None:
                first_error = DecodeError(
                    f"Invalid JSON in model output: {exc.msg} (char {start + exc.pos})",
                    text,
                    position=start + exc.pos,
                )
            continue
        if isinstance(decoded, list):
            return decoded

    if first_error is not None:
        raise first_error
    raise NoStructuredPayload("No JSON array found in model output", text)


def parse_candidates(text: str) -> List[ExtractionCandidate]:
    """Decode *text* into extraction candidates.

    Array elements that are not ``{name, keywords}``-shaped objects are
    dropped; the result may be empty.

    Raises:
        NoStructuredPayload: See :func:`find_json_array`.
        DecodeError: See :func:`find_json_array`.
    """
    candidates: List[ExtractionCandidate] = []
    for element in find_json_array(text):
        if not isinstance(element, dict):
            logger.debug("Skipping non-object array element: %r", element)
            continue
        try:
            candidates.append(ExtractionCandidate.model_validate(element))
        except ValidationError as exc:
            logger.debug("Skipping malformed candidate %r: %s", element, exc)
    return candidates
