"""Firecrawl package: remote crawl jobs and status polling."""

from pagecrawl.firecrawl.client import FirecrawlClient, crawl_options
from pagecrawl.firecrawl.items import item_description, item_product_name
from pagecrawl.firecrawl.poller import wait_for_job

__all__ = [
    "FirecrawlClient",
    "crawl_options",
    "item_description",
    "item_product_name",
    "wait_for_job",
]
