"""Completion client for an Ollama-compatible ``/api/generate`` endpoint.

Configure via ``OLLAMA_BASE_URL`` and ``OLLAMA_MODEL``.  Every failure is
reported as :class:`~pagecrawl.errors.InvocationError`; retrying is left to
the caller.
"""

from __future__ import annotations

import logging

import httpx

from pagecrawl.config import Settings
from pagecrawl.errors import InvocationError

logger = logging.getLogger(__name__)


def complete(prompt: str, settings: Settings, *, num_predict: int, timeout: float) -> str:
    """Request a single non-streaming completion for *prompt*.

    Args:
        prompt: Full prompt text.
        settings: Supplies the endpoint and model name.
        num_predict: Output-token budget for the completion.
        timeout: Request timeout in seconds.

    Returns:
        The raw completion text.

    Raises:
        InvocationError: On a transport error, timeout, non-2xx status or a
            reply without a ``response`` field.
    """
    payload = {
        "model": settings.ollama_model,
        "prompt": prompt,
        "stream": False,
        "options": {"num_predict": num_predict},
    }
    try:
        with httpx.Client(timeout=timeout) as client:
            response = client.post(f"{settings.ollama_base_url}/api/generate", json=payload)
            response.raise_for_status()
            body = response.json()
    except httpx.TimeoutException as exc:
        raise InvocationError(f"LLM request timed out after {timeout:g}s") from exc
    except httpx.HTTPStatusError as exc:
        raise InvocationError(f"LLM returned HTTP {exc.response.status_code}") from exc
    except httpx.HTTPError as exc:
        raise InvocationError(f"LLM request failed: {exc}") from exc
    except ValueError as exc:
        raise InvocationError("LLM reply is not valid JSON") from exc

    text = body.get("response") if isinstance(body, dict) else None
    if not isinstance(text, str):
        raise InvocationError("LLM reply has no 'response' field")

    logger.debug("LLM completion (%d chars): %s", len(text), text)
    return text
