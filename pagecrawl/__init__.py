"""Landing-page product crawler: LLM extraction with validation and retries."""

from pagecrawl.models import AcquisitionMode, PageContent, RunSummary, ValidatedRecord
from pagecrawl.pipeline import run_pipeline

__all__ = ["AcquisitionMode", "PageContent", "RunSummary", "ValidatedRecord", "run_pipeline"]
