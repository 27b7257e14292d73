"""Shared interface and helpers for the two extraction tiers.

Both tiers expose the same capability: fetch a page and extract the
:class:`~docgen.scraper.models.ScrapedPage` fields from it.  The orchestrator
only depends on :class:`PageExtractor`, so tests can substitute fakes.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Optional
from urllib.parse import urljoin

from docgen.scraper.models import ScrapedPage, ScraperOptions

# Subtrees removed before body text is collected.
NOISE_TAGS = ("script", "style", "noscript", "nav", "footer", "header", "aside")

# A <p> must be longer than this to stand in for a missing meta description.
MIN_PARAGRAPH_CHARS = 40

_WHITESPACE_RE = re.compile(r"\s+")


def collapse_whitespace(text: str) -> str:
    """Collapse every whitespace run to a single space and strip the ends."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def resolve_url(raw: Optional[str], base_url: str) -> Optional[str]:
    """Resolve *raw* against *base_url*; ``None`` when it cannot be resolved."""
    if raw is None:
        return None
    raw = raw.strip()
    if not raw:
        return None
    try:
        return urljoin(base_url, raw)
    except ValueError:
        return None


class PageExtractor(ABC):
    """One way of turning a URL into a :class:`ScrapedPage`."""

    @property
    @abstractmethod
    def tier(self) -> int:
        """``1`` for the plain-HTTP tier, ``2`` for the browser tier."""

    @abstractmethod
    def extract(self, url: str, options: ScraperOptions) -> ScrapedPage:
        """Scrape *url*.  Raises on failure; never returns a partial record."""
