"""Scraper service: the public entry point of the two-tier strategy.

    Tier 1 (fast):  HTTP fetch + BeautifulSoup.  Static and server-rendered
                    pages; no browser required.
    Tier 2 (heavy): Playwright headless Chromium.  Used when Tier 1 flags a
                    JS-only shell, returns thin content, or fails outright.

The escalation policy is a small explicit state machine::

    TIER1_ATTEMPT ──usable──────────────────────────────▶ SUCCEEDED
         │ thin / flagged / raised
         ▼
    TIER2_DECISION ──skip_tier2──▶ SUCCEEDED (Tier 1 fallback) | FAILED (tier=1)
         │
         ▼
    TIER2_ATTEMPT ──ok──▶ SUCCEEDED (Tier 2)
         │ raised
         └─────────────▶ SUCCEEDED (Tier 1 fallback) | FAILED (tier="both")

Each tier runs at most once per call and no state survives between calls.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from docgen.scraper.base import PageExtractor
from docgen.scraper.models import ScrapedPage, ScraperError, ScraperOptions
from docgen.scraper.tier1 import Tier1Extractor
from docgen.scraper.tier2 import Tier2Extractor

logger = logging.getLogger(__name__)

# A Tier 1 page with no title, no description and less body text than this
# is treated as thin and escalated.
THIN_BODY_TEXT_CHARS = 50


class ScrapeState(enum.Enum):
    TIER1_ATTEMPT = "tier1_attempt"
    TIER2_DECISION = "tier2_decision"
    TIER2_ATTEMPT = "tier2_attempt"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


TERMINAL_STATES = frozenset({ScrapeState.SUCCEEDED, ScrapeState.FAILED})


@dataclass
class ScrapeRun:
    """Everything one :meth:`ScraperService.scrape` call knows so far."""

    url: str
    options: ScraperOptions
    state: ScrapeState = ScrapeState.TIER1_ATTEMPT
    tier1_page: Optional[ScrapedPage] = None
    tier1_error: Optional[Exception] = None
    tier2_error: Optional[Exception] = None
    result: Optional[ScrapedPage] = None
    error: Optional[ScraperError] = None


def is_tier1_result_usable(page: ScrapedPage) -> bool:
    """Return ``True`` if a Tier 1 page can be returned without escalating.

    The page must not be flagged as a JS shell and must carry a title, a
    description, or at least a little body text.
    """
    if getattr(page, "needs_tier2", False):
        return False
    if not page.title and not page.description and len(page.body_text) < THIN_BODY_TEXT_CHARS:
        return False
    return True


def _error_text(exc: Optional[Exception]) -> Optional[str]:
    if exc is None:
        return None
    return str(exc) or type(exc).__name__


def advance(run: ScrapeRun, tier1: PageExtractor, tier2: PageExtractor) -> ScrapeState:
    """Perform the work of ``run.state`` and move *run* to its next state."""
    if run.state is ScrapeState.TIER1_ATTEMPT:
        try:
            page = tier1.extract(run.url, run.options)
        except Exception as exc:
            logger.warning("Tier 1 failed for %s: %s", run.url, exc)
            run.tier1_error = exc
            run.state = ScrapeState.TIER2_DECISION
            return run.state

        if is_tier1_result_usable(page):
            run.result = page
            run.state = ScrapeState.SUCCEEDED
        else:
            logger.info("Tier 1 result for %s is thin or JS-only; escalating", run.url)
            run.tier1_page = page
            run.state = ScrapeState.TIER2_DECISION
        return run.state

    if run.state is ScrapeState.TIER2_DECISION:
        if not run.options.skip_tier2:
            run.state = ScrapeState.TIER2_ATTEMPT
        elif run.tier1_page is not None:
            # Thin Tier 1 data beats an error when escalation is disabled.
            run.result = run.tier1_page
            run.state = ScrapeState.SUCCEEDED
        else:
            run.error = ScraperError(
                _error_text(run.tier1_error) or "Tier 1 failed and Tier 2 is disabled",
                run.url,
                1,
            )
            run.state = ScrapeState.FAILED
        return run.state

    if run.state is ScrapeState.TIER2_ATTEMPT:
        try:
            run.result = tier2.extract(run.url, run.options)
            run.state = ScrapeState.SUCCEEDED
        except Exception as exc:
            logger.warning("Tier 2 failed for %s: %s", run.url, exc)
            run.tier2_error = exc
            if run.tier1_page is not None:
                run.result = run.tier1_page
                run.state = ScrapeState.SUCCEEDED
            else:
                run.error = ScraperError(
                    f"Tier 1: {_error_text(run.tier1_error) or 'JS-only page'}; "
                    f"Tier 2: {_error_text(exc)}",
                    run.url,
                    "both",
                )
                run.state = ScrapeState.FAILED
        return run.state

    raise ValueError(f"Scrape run is already finished ({run.state.value})")


class ScraperService:
    """Runs the escalation policy over a pair of :class:`PageExtractor` tiers."""

    def __init__(
        self,
        tier1: Optional[PageExtractor] = None,
        tier2: Optional[PageExtractor] = None,
    ) -> None:
        self._tier1 = tier1 or Tier1Extractor()
        self._tier2 = tier2 or Tier2Extractor()

    def scrape(self, url: str, options: Optional[ScraperOptions] = None) -> ScrapedPage:
        """Scrape *url* with Tier 1, escalating to Tier 2 when needed.

        Raises:
            ScraperError: If no tier produced a usable page.
        """
        run = ScrapeRun(url=url, options=options or ScraperOptions())
        while run.state not in TERMINAL_STATES:
            advance(run, self._tier1, self._tier2)

        if run.state is ScrapeState.FAILED:
            cause = run.tier2_error or run.tier1_error
            raise run.error from cause

        logger.info("Scraped %s with tier %d", url, run.result.tier)
        return run.result


def scrape(url: str, options: Optional[ScraperOptions] = None) -> ScrapedPage:
    """Scrape *url* using the default two-tier service."""
    return ScraperService().scrape(url, options)
