"""Centralised settings for the product crawler.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).

The pipeline never reads these values implicitly: callers pass a
:class:`Settings` instance into :func:`pagecrawl.pipeline.run_pipeline`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Language model (Ollama-compatible /api/generate endpoint)
    # ------------------------------------------------------------------
    ollama_base_url: str = field(
        default_factory=lambda: os.environ.get("OLLAMA_BASE_URL", "http://localhost:11434")
    )
    ollama_model: str = field(
        default_factory=lambda: os.environ.get("OLLAMA_MODEL", "mistral")
    )
    extraction_timeout: float = field(
        default_factory=lambda: float(os.environ.get("EXTRACTION_TIMEOUT", "60.0"))
    )
    extraction_num_predict: int = field(
        default_factory=lambda: int(os.environ.get("EXTRACTION_NUM_PREDICT", "500"))
    )
    keyword_timeout: float = field(
        default_factory=lambda: float(os.environ.get("KEYWORD_TIMEOUT", "30.0"))
    )
    keyword_num_predict: int = field(
        default_factory=lambda: int(os.environ.get("KEYWORD_NUM_PREDICT", "200"))
    )

    # ------------------------------------------------------------------
    # Retry controller
    # ------------------------------------------------------------------
    max_retries: int = field(
        default_factory=lambda: int(os.environ.get("MAX_RETRIES", "5"))
    )
    retry_delay: float = field(
        default_factory=lambda: float(os.environ.get("RETRY_DELAY", "1.0"))
    )

    # ------------------------------------------------------------------
    # Scraper
    # ------------------------------------------------------------------
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("REQUEST_TIMEOUT", "10.0"))
    )
    max_redirects: int = field(
        default_factory=lambda: int(os.environ.get("MAX_REDIRECTS", "5"))
    )
    excerpt_chars: int = field(
        default_factory=lambda: int(os.environ.get("EXCERPT_CHARS", "4000"))
    )

    # ------------------------------------------------------------------
    # Politeness delays (seconds)
    # ------------------------------------------------------------------
    source_delay: float = field(
        default_factory=lambda: float(os.environ.get("SOURCE_DELAY", "2.0"))
    )
    keyword_delay: float = field(
        default_factory=lambda: float(os.environ.get("KEYWORD_DELAY", "0.5"))
    )

    # ------------------------------------------------------------------
    # Firecrawl (remote acquisition mode)
    # ------------------------------------------------------------------
    firecrawl_api_key: str = field(
        default_factory=lambda: os.environ.get("FIRECRAWL_API_KEY", "")
    )
    firecrawl_base_url: str = field(
        default_factory=lambda: os.environ.get("FIRECRAWL_BASE_URL", "https://api.firecrawl.dev")
    )
    firecrawl_page_limit: int = field(
        default_factory=lambda: int(os.environ.get("FIRECRAWL_PAGE_LIMIT", "10"))
    )
    firecrawl_timeout: float = field(
        default_factory=lambda: float(os.environ.get("FIRECRAWL_TIMEOUT", "30.0"))
    )
    poll_max_attempts: int = field(
        default_factory=lambda: int(os.environ.get("POLL_MAX_ATTEMPTS", "60"))
    )
    poll_interval: float = field(
        default_factory=lambda: float(os.environ.get("POLL_INTERVAL", "10.0"))
    )

    # ------------------------------------------------------------------
    # Output / logging
    # ------------------------------------------------------------------
    output_dir: Path = field(
        default_factory=lambda: Path(os.environ.get("OUTPUT_DIR", "."))
    )
    log_level: str = field(
        default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO")
    )

    def ensure_output_dir(self) -> None:
        """Create the output directory if it does not exist."""
        self.output_dir.mkdir(parents=True, exist_ok=True)


# Module-level singleton; the CLI passes it into the pipeline:
#   from pagecrawl.config import settings
settings = Settings()
