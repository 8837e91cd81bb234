"""Product crawler CLI: entry-point for pipeline runs.

Usage:
    python cli/main.py --help

Commands:
    crawl    → run the pipeline over many landing pages and write the CSV report
    extract  → run the direct pipeline for a single page and print the records
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from pagecrawl.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import logging
from typing import List, Optional

import typer

from pagecrawl.config import settings
from pagecrawl.errors import FetchError
from pagecrawl.models import AcquisitionMode
from pagecrawl.pipeline import process_direct_source, read_sources, run_pipeline
from pagecrawl.report import report_path, write_report

app = typer.Typer(
    name="product-crawler",
    help="Extract product and article names from landing pages.",
    no_args_is_help=True,
)

_LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=_LOG_FORMAT, force=True)
    # Per-request lines from the HTTP client drown out the pipeline's own.
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ---------------------------------------------------------------------------
# crawl
# ---------------------------------------------------------------------------
@app.command("crawl")
def crawl(
    urls: Optional[List[str]] = typer.Argument(None, help="Landing-page URLs to crawl."),
    file: Optional[Path] = typer.Option(
        None, "--file", "-f", exists=True, dir_okay=False, help="File with one URL per line."
    ),
    mode: AcquisitionMode = typer.Option(
        AcquisitionMode.DIRECT, "--mode", help="Acquisition mode: direct | firecrawl."
    ),
    output_dir: Optional[Path] = typer.Option(None, "--output-dir", help="Directory for the CSV report."),
    log_level: str = typer.Option(settings.log_level, "--log-level", help="Logging level."),
) -> None:
    """Crawl every URL, extract products, and write the CSV report."""
    _configure_logging(log_level)

    sources = list(urls or [])
    if file is not None:
        sources.extend(read_sources(file.read_text(encoding="utf-8").splitlines()))
    if not sources:
        typer.echo("[crawl] No URLs given. Pass URLs as arguments or use --file.", err=True)
        raise typer.Exit(code=1)

    if output_dir is not None:
        settings.output_dir = output_dir

    typer.echo(f"[crawl] Starting {mode.value} crawl of {len(sources)} site(s) …")
    try:
        summary = run_pipeline(sources, settings, mode)
    except EnvironmentError as exc:
        typer.echo(f"[crawl] ✗ {exc}", err=True)
        raise typer.Exit(code=1)

    path = report_path(settings, mode)
    try:
        write_report(summary.records, path)
    except OSError as exc:
        typer.echo(f"[crawl] ✗ Could not write report {path}: {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo("=" * 70)
    typer.echo("[crawl] ✓ Crawling complete!")
    typer.echo(f"  File               : {path}")
    typer.echo(f"  Products extracted : {len(summary.records)}")
    typer.echo(f"  Sites with products: {summary.succeeded}")
    typer.echo(f"  Sites with none    : {summary.empty}")
    typer.echo(f"  Failed sites       : {summary.failed}")
    typer.echo("=" * 70)


# ---------------------------------------------------------------------------
# extract
# ---------------------------------------------------------------------------
@app.command("extract")
def extract(
    url: str = typer.Option(..., help="Landing-page URL."),
    log_level: str = typer.Option(settings.log_level, "--log-level", help="Logging level."),
) -> None:
    """Extract products from a single page and print them (no report is written)."""
    _configure_logging(log_level)

    typer.echo(f"[extract] Fetching {url!r} …")
    try:
        records = process_direct_source(url, settings)
    except FetchError as exc:
        typer.echo(f"[extract] ✗ {exc}", err=True)
        raise typer.Exit(code=1)

    if not records:
        typer.echo("[extract] No products found.")
        return
    for record in records:
        typer.echo(f"  {record.product_name}  [{record.keywords}]")


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
