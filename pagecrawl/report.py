"""CSV report for the aggregated records of a pipeline run."""

from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import Iterable

from pagecrawl.config import Settings
from pagecrawl.models import AcquisitionMode, ValidatedRecord

HEADER = ["URL", "Product Name", "Keywords"]


def records_to_csv(records: Iterable[ValidatedRecord]) -> str:
    """Serialise *records* in order.

    The header row is written bare; every data field is double-quoted with
    embedded quotes doubled.
    """
    buffer = io.StringIO()
    buffer.write(",".join(HEADER) + "\n")
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for record in records:
        writer.writerow([record.source_url, record.product_name, record.keywords])
    return buffer.getvalue()


def report_path(settings: Settings, mode: AcquisitionMode) -> Path:
    """Return the report file for *mode*; one file per mode, overwritten each run."""
    return settings.output_dir / f"product_crawler_results_{mode.value}.csv"


def write_report(records: Iterable[ValidatedRecord], path: Path) -> Path:
    """Write *records* to *path* as UTF-8 CSV, replacing any previous report.

    Raises:
        OSError: If the file cannot be written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(records_to_csv(records), encoding="utf-8")
    return path
