"""Tier 2 — headless Chromium via Playwright.

Loads the page in a real browser, gives the network a bounded chance to
settle, then extracts the same fields as Tier 1 from the live DOM.  Much
heavier than Tier 1 (hundreds of milliseconds up to the navigation deadline),
so the orchestrator only reaches for it when Tier 1 is not good enough.

Requires ``playwright install chromium`` in the target environment.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from docgen.config import settings
from docgen.scraper.base import MIN_PARAGRAPH_CHARS, NOISE_TAGS, PageExtractor, resolve_url
from docgen.scraper.models import ScrapedImage, ScrapedPage, ScraperOptions
from docgen.scraper.photo_filter import filter_product_photos

logger = logging.getLogger(__name__)

# Runs inside the page.  Mirrors the Tier 1 precedence rules; the body-text
# limit and paragraph threshold are passed in as arguments.
_EXTRACT_JS = """
([bodyTextLimit, minParagraphChars, noiseSelector]) => {
  const meta = (selector) =>
    (document.querySelector(selector)?.getAttribute('content') ?? '').trim();

  const title = meta('meta[property="og:title"]') || (document.title || '').trim();

  let description =
    meta('meta[property="og:description"]') || meta('meta[name="description"]');
  if (!description) {
    for (const p of document.querySelectorAll('p')) {
      const text = (p.textContent || '').trim();
      if (text.length > minParagraphChars) {
        description = text;
        break;
      }
    }
  }

  const ogImage = meta('meta[property="og:image"]') || null;

  const images = [];
  for (const img of document.querySelectorAll('img')) {
    const src = img.getAttribute('src') || img.getAttribute('data-src') || '';
    if (!src) continue;
    let url;
    try {
      url = new URL(src, window.location.href).href;
    } catch (e) {
      continue;
    }
    images.push({
      url,
      alt: img.getAttribute('alt') || '',
      width: img.naturalWidth || img.width || 0,
      height: img.naturalHeight || img.height || 0,
    });
  }

  let bodyText = '';
  if (document.body) {
    const clone = document.body.cloneNode(true);
    clone.querySelectorAll(noiseSelector).forEach((el) => el.remove());
    bodyText = (clone.textContent || '').replace(/\\s+/g, ' ').trim().slice(0, bodyTextLimit);
  }

  return { title, description, ogImage, images, bodyText };
}
"""


def _positive(value: Any) -> Optional[int]:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def build_page(extracted: dict, final_url: str) -> ScrapedPage:
    """Turn the in-page extraction payload into a filtered :class:`ScrapedPage`.

    Zero or missing dimensions become "unknown" so the size filter does not
    reject images the browser had not measured yet.
    """
    images: List[ScrapedImage] = []
    for raw in extracted.get("images") or []:
        url = raw.get("url")
        if not url:
            continue
        images.append(
            ScrapedImage(
                url=url,
                alt=raw.get("alt") or "",
                width=_positive(raw.get("width")),
                height=_positive(raw.get("height")),
            )
        )

    return ScrapedPage(
        url=final_url,
        title=extracted.get("title") or "",
        description=extracted.get("description") or "",
        og_image=resolve_url(extracted.get("ogImage"), final_url),
        images=filter_product_photos(images, max_results=settings.max_images),
        body_text=extracted.get("bodyText") or "",
        tier=2,
        js_rendered=True,
    )


def _render_and_extract(page: Any, url: str, timeout_ms: int) -> ScrapedPage:
    from playwright.sync_api import TimeoutError as PlaywrightTimeoutError  # noqa: PLC0415

    # Only wait for the DOM; full "load" can take far longer on product pages.
    page.goto(url, timeout=timeout_ms, wait_until="domcontentloaded")

    try:
        page.wait_for_load_state("networkidle", timeout=settings.network_idle_timeout_ms)
    except PlaywrightTimeoutError:
        logger.debug("Network never went idle for %s; extracting current DOM", url)

    final_url = page.url
    extracted = page.evaluate(
        _EXTRACT_JS,
        [settings.body_text_limit, MIN_PARAGRAPH_CHARS, ",".join(NOISE_TAGS)],
    )
    return build_page(extracted or {}, final_url)


def scrape_with_tier2(url: str, options: Optional[ScraperOptions] = None) -> ScrapedPage:
    """Render *url* in headless Chromium and extract a :class:`ScrapedPage`.

    The browser and its context are closed on every exit path, including when
    navigation or evaluation raises.

    Raises:
        playwright.sync_api.TimeoutError: If navigation exceeds the deadline.
        playwright.sync_api.Error: On any other browser failure.
    """
    # Imported lazily so the rest of the package works without Playwright.
    from playwright.sync_api import sync_playwright  # noqa: PLC0415

    options = options or ScraperOptions()
    timeout_ms = options.timeout_ms or settings.tier2_timeout_ms

    with sync_playwright() as pw:
        browser = pw.chromium.launch(headless=settings.headless)
        try:
            context = browser.new_context(
                user_agent=settings.user_agent,
                viewport={
                    "width": settings.viewport_width,
                    "height": settings.viewport_height,
                },
            )
            try:
                page = context.new_page()
                return _render_and_extract(page, url, timeout_ms)
            finally:
                context.close()
        finally:
            browser.close()


class Tier2Extractor(PageExtractor):
    """:class:`PageExtractor` adapter over :func:`scrape_with_tier2`."""

    @property
    def tier(self) -> int:
        return 2

    def extract(self, url: str, options: ScraperOptions) -> ScrapedPage:
        return scrape_with_tier2(url, options)
