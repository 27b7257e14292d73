"""Bounded parallel scraping for callers with many URLs.

``scrape`` itself imposes no concurrency limit; this helper is the caller-side
worker pool.  Each URL gets its own HTTP request and, when needed, its own
browser, so the pool size is also the ceiling on concurrent Chromium
processes.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from docgen.config import settings
from docgen.scraper.models import ScrapedPage, ScraperError, ScraperOptions
from docgen.scraper.service import ScraperService

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Outcome for one URL: exactly one of ``page`` and ``error`` is set."""

    url: str
    page: Optional[ScrapedPage] = None
    error: Optional[ScraperError] = None

    @property
    def ok(self) -> bool:
        return self.page is not None


def scrape_many(
    urls: Iterable[str],
    options: Optional[ScraperOptions] = None,
    max_workers: Optional[int] = None,
    service: Optional[ScraperService] = None,
) -> List[BatchResult]:
    """Scrape every unique URL in *urls* on a thread pool.

    Args:
        urls: URLs to scrape; duplicates are scraped once.
        options: Forwarded to every :meth:`ScraperService.scrape` call.
        max_workers: Pool size; defaults to ``settings.max_concurrent_scrapes``.
        service: Service to use (a default two-tier one when omitted).

    Returns:
        One :class:`BatchResult` per unique URL, in first-seen order.  A
        :class:`ScraperError` is recorded on its result; any other exception
        propagates.
    """
    unique: List[str] = []
    seen: set[str] = set()
    for url in urls:
        if url not in seen:
            seen.add(url)
            unique.append(url)

    if not unique:
        return []

    service = service or ScraperService()
    limit = max(1, max_workers or settings.max_concurrent_scrapes)
    results: Dict[str, BatchResult] = {}

    with ThreadPoolExecutor(max_workers=min(limit, len(unique))) as pool:
        future_to_url = {pool.submit(service.scrape, url, options): url for url in unique}
        for future in as_completed(future_to_url):
            url = future_to_url[future]
            try:
                results[url] = BatchResult(url=url, page=future.result())
            except ScraperError as exc:
                logger.warning("Failed to scrape %s: %s", url, exc)
                results[url] = BatchResult(url=url, error=exc)

    return [results[url] for url in unique]
