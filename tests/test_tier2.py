"""Tests for Tier 2 — Playwright rendering.

No real browser is launched: ``playwright.sync_api.sync_playwright`` is
replaced with a ``MagicMock`` chain (playwright → browser → context → page)
so the tests can assert on navigation arguments and on teardown.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from docgen.scraper.models import ScraperOptions
from docgen.scraper.tier2 import Tier2Extractor, build_page, scrape_with_tier2

_PAYLOAD = {
    "title": "Great Camera (JS)",
    "description": "Rendered by JavaScript.",
    "ogImage": "/media/og.jpg",
    "images": [
        {"url": "https://shop.com/p/hero.jpg", "alt": "Hero", "width": 1200, "height": 900},
        {"url": "https://shop.com/icons/cart.png", "alt": "", "width": 24, "height": 24},
        {"url": "https://shop.com/p/lazy.jpg", "alt": "Lazy", "width": 0, "height": 0},
    ],
    "bodyText": "Full JavaScript-rendered content about this camera product.",
}


def _fake_playwright(page: MagicMock):
    """Return ``(sync_playwright_factory, browser, context)`` wired to *page*."""
    pw = MagicMock()
    browser = pw.chromium.launch.return_value
    context = browser.new_context.return_value
    context.new_page.return_value = page

    manager = MagicMock()
    manager.__enter__.return_value = pw
    manager.__exit__.return_value = False
    factory = MagicMock(return_value=manager)
    return factory, browser, context


def _page(final_url: str = "https://shop.com/product", payload: dict | None = None) -> MagicMock:
    page = MagicMock()
    page.url = final_url
    page.evaluate.return_value = _PAYLOAD if payload is None else payload
    return page


# ---------------------------------------------------------------------------
# build_page
# ---------------------------------------------------------------------------

class TestBuildPage:
    def test_marks_page_as_js_rendered_tier2(self) -> None:
        page = build_page(_PAYLOAD, "https://shop.com/product")
        assert page.tier == 2
        assert page.js_rendered is True
        assert page.url == "https://shop.com/product"

    def test_applies_photo_filter(self) -> None:
        page = build_page(_PAYLOAD, "https://shop.com/product")
        assert [img.url for img in page.images] == [
            "https://shop.com/p/hero.jpg",
            "https://shop.com/p/lazy.jpg",
        ]

    def test_zero_dimensions_become_unknown(self) -> None:
        page = build_page(_PAYLOAD, "https://shop.com/product")
        lazy = page.images[1]
        assert lazy.width is None
        assert lazy.height is None

    def test_resolves_og_image(self) -> None:
        page = build_page(_PAYLOAD, "https://shop.com/product")
        assert page.og_image == "https://shop.com/media/og.jpg"

    def test_missing_fields_default_to_empty(self) -> None:
        page = build_page({"ogImage": None}, "https://shop.com/")
        assert page.title == ""
        assert page.description == ""
        assert page.og_image is None
        assert page.images == []
        assert page.body_text == ""


# ---------------------------------------------------------------------------
# scrape_with_tier2
# ---------------------------------------------------------------------------

class TestScrapeWithTier2:
    def test_successful_render(self) -> None:
        page = _page()
        factory, browser, context = _fake_playwright(page)
        with patch("playwright.sync_api.sync_playwright", factory):
            result = scrape_with_tier2("https://shop.com/product")

        assert result.title == "Great Camera (JS)"
        assert result.tier == 2
        assert result.js_rendered is True
        context.close.assert_called_once()
        browser.close.assert_called_once()

    def test_uses_desktop_context(self) -> None:
        factory, browser, _ = _fake_playwright(_page())
        with patch("playwright.sync_api.sync_playwright", factory):
            scrape_with_tier2("https://shop.com/product")

        kwargs = browser.new_context.call_args.kwargs
        assert "Mozilla/5.0" in kwargs["user_agent"]
        assert kwargs["viewport"] == {"width": 1280, "height": 900}

    def test_navigation_waits_for_dom_only(self) -> None:
        page = _page()
        factory, _, _ = _fake_playwright(page)
        with patch("playwright.sync_api.sync_playwright", factory):
            scrape_with_tier2("https://shop.com/product", ScraperOptions(timeout_ms=7000))

        page.goto.assert_called_once_with(
            "https://shop.com/product", timeout=7000, wait_until="domcontentloaded"
        )
        page.wait_for_load_state.assert_called_once_with("networkidle", timeout=5000)

    def test_default_navigation_timeout(self) -> None:
        page = _page()
        factory, _, _ = _fake_playwright(page)
        with patch("playwright.sync_api.sync_playwright", factory):
            scrape_with_tier2("https://shop.com/product")

        assert page.goto.call_args.kwargs["timeout"] == 20000

    def test_network_idle_timeout_is_not_an_error(self) -> None:
        page = _page()
        page.wait_for_load_state.side_effect = PlaywrightTimeoutError("Timeout 5000ms exceeded.")
        factory, browser, _ = _fake_playwright(page)
        with patch("playwright.sync_api.sync_playwright", factory):
            result = scrape_with_tier2("https://shop.com/product")

        assert result.title == "Great Camera (JS)"
        page.evaluate.assert_called_once()
        browser.close.assert_called_once()

    def test_uses_post_redirect_url(self) -> None:
        factory, _, _ = _fake_playwright(_page(final_url="https://shop.com/redirected"))
        with patch("playwright.sync_api.sync_playwright", factory):
            result = scrape_with_tier2("https://shop.com/product")

        assert result.url == "https://shop.com/redirected"

    def test_navigation_timeout_propagates_and_releases_browser(self) -> None:
        page = _page()
        page.goto.side_effect = PlaywrightTimeoutError("Timeout 20000ms exceeded.")
        factory, browser, context = _fake_playwright(page)
        with patch("playwright.sync_api.sync_playwright", factory):
            with pytest.raises(PlaywrightTimeoutError):
                scrape_with_tier2("https://shop.com/product")

        page.evaluate.assert_not_called()
        context.close.assert_called_once()
        browser.close.assert_called_once()

    def test_evaluation_error_propagates_and_releases_browser(self) -> None:
        page = _page()
        page.evaluate.side_effect = PlaywrightError("Execution context was destroyed")
        factory, browser, context = _fake_playwright(page)
        with patch("playwright.sync_api.sync_playwright", factory):
            with pytest.raises(PlaywrightError):
                scrape_with_tier2("https://shop.com/product")

        context.close.assert_called_once()
        browser.close.assert_called_once()

    def test_context_failure_still_closes_browser(self) -> None:
        factory, browser, _ = _fake_playwright(_page())
        browser.new_context.side_effect = PlaywrightError("Target closed")
        with patch("playwright.sync_api.sync_playwright", factory):
            with pytest.raises(PlaywrightError):
                scrape_with_tier2("https://shop.com/product")

        browser.close.assert_called_once()

    def test_extractor_adapter(self) -> None:
        factory, _, _ = _fake_playwright(_page())
        extractor = Tier2Extractor()
        with patch("playwright.sync_api.sync_playwright", factory):
            result = extractor.extract("https://shop.com/product", ScraperOptions())

        assert extractor.tier == 2
        assert result.js_rendered is True
