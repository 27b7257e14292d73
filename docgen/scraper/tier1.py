"""Tier 1 — plain HTTP fetch + BeautifulSoup parse.

Fast and browser-free, but blind to anything injected by client-side
JavaScript.  When the markup looks like an unrendered SPA shell the result is
flagged with ``needs_tier2`` so the orchestrator can escalate straight away.
"""

from __future__ import annotations

import logging
import re
import time
from typing import List, Optional

import httpx
from bs4 import BeautifulSoup

from docgen.config import settings
from docgen.scraper.base import (
    MIN_PARAGRAPH_CHARS,
    NOISE_TAGS,
    PageExtractor,
    collapse_whitespace,
    resolve_url,
)
from docgen.scraper.models import ScrapedImage, ScraperOptions, Tier1Page
from docgen.scraper.photo_filter import filter_product_photos

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Client-rendered shell detection
# ---------------------------------------------------------------------------
_APP_ROOT_IDS = ("root", "app", "__next", "__nuxt")

_SPA_MARKUP_PATTERNS = [
    re.compile(r"window\.__NEXT_DATA__", re.IGNORECASE),
    re.compile(r"\bng-version=", re.IGNORECASE),
    re.compile(r"\bdata-reactroot\b", re.IGNORECASE),
]

# Below this many characters of body text a marked page counts as a shell.
_SHELL_TEXT_THRESHOLD = 200

_HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml", "text/xml", "application/xml")

_LEADING_INT_RE = re.compile(r"\s*\+?(\d+)")


class UnsupportedContentError(ValueError):
    """The server answered with something that is not an HTML document."""


def _request_headers() -> dict:
    return {
        "User-Agent": settings.user_agent,
        "Accept": "text/html,application/xhtml+xml",
        "Accept-Language": "en-US,en;q=0.9",
    }


# ---------------------------------------------------------------------------
# Field extraction helpers
# ---------------------------------------------------------------------------

def _meta_content(soup: BeautifulSoup, **attrs: str) -> str:
    tag = soup.find("meta", attrs=attrs)
    if tag is None:
        return ""
    return (tag.get("content") or "").strip()


def extract_title(soup: BeautifulSoup) -> str:
    """``og:title`` first, then the first ``<title>`` element."""
    og_title = _meta_content(soup, property="og:title")
    if og_title:
        return og_title
    title = soup.find("title")
    return title.get_text().strip() if title else ""


def extract_description(soup: BeautifulSoup) -> str:
    """``og:description`` → ``<meta name="description">`` → first long ``<p>``."""
    og_desc = _meta_content(soup, property="og:description")
    if og_desc:
        return og_desc

    meta_desc = _meta_content(soup, name="description")
    if meta_desc:
        return meta_desc

    for para in soup.find_all("p"):
        text = para.get_text().strip()
        if len(text) > MIN_PARAGRAPH_CHARS:
            return text
    return ""


def extract_og_image(soup: BeautifulSoup, base_url: str) -> Optional[str]:
    return resolve_url(_meta_content(soup, property="og:image"), base_url)


def _parse_dimension(value: Optional[str]) -> Optional[int]:
    """Leading integer of a width/height attribute, or ``None`` if not positive."""
    if not value:
        return None
    match = _LEADING_INT_RE.match(value)
    if not match:
        return None
    number = int(match.group(1))
    return number if number > 0 else None


def extract_images(soup: BeautifulSoup, base_url: str) -> List[ScrapedImage]:
    """Every ``<img>`` with a resolvable ``src``/``data-src``, in document order."""
    images: List[ScrapedImage] = []
    for img in soup.find_all("img"):
        src = img.get("src") or img.get("data-src") or ""
        resolved = resolve_url(src, base_url)
        if not resolved:
            continue
        images.append(
            ScrapedImage(
                url=resolved,
                alt=img.get("alt") or "",
                width=_parse_dimension(img.get("width")),
                height=_parse_dimension(img.get("height")),
            )
        )
    return images


def extract_body_text(soup: BeautifulSoup) -> str:
    """Visible body text with noise subtrees removed.

    Mutates *soup*: call it after every other extractor.
    """
    for tag in soup(list(NOISE_TAGS)):
        tag.decompose()
    container = soup.body
    if container is None:
        # html.parser does not synthesize <body> when the tag is omitted.
        for tag in soup(["head", "title", "meta"]):
            tag.decompose()
        container = soup
    text = collapse_whitespace(container.get_text(separator=" "))
    return text[: settings.body_text_limit]


def has_app_shell_markers(html: str, soup: BeautifulSoup) -> bool:
    """Return ``True`` if the markup carries a client-side framework mount point."""
    for root_id in _APP_ROOT_IDS:
        if soup.find(id=root_id) is not None:
            return True
    return any(pattern.search(html) for pattern in _SPA_MARKUP_PATTERNS)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def parse_html(html: str, url: str) -> Tier1Page:
    """Parse *html* (served from *url*) into a :class:`Tier1Page`.

    No network access; exported so callers holding HTML already, and the unit
    tests, can skip the fetch.
    """
    soup = BeautifulSoup(html, "html.parser")

    title = extract_title(soup)
    description = extract_description(soup)
    og_image = extract_og_image(soup, url)
    raw_images = extract_images(soup, url)
    shell_markers = has_app_shell_markers(html, soup)
    body_text = extract_body_text(soup)

    needs_tier2 = shell_markers and len(body_text) < _SHELL_TEXT_THRESHOLD

    return Tier1Page(
        url=url,
        title=title,
        description=description,
        og_image=og_image,
        images=filter_product_photos(raw_images, max_results=settings.max_images),
        body_text=body_text,
        tier=1,
        js_rendered=False,
        needs_tier2=needs_tier2,
    )


def _check_content_type(response: httpx.Response) -> None:
    content_type = response.headers.get("content-type", "")
    if not content_type:
        return
    mime = content_type.split(";", 1)[0].strip().lower()
    if mime not in _HTML_CONTENT_TYPES:
        raise UnsupportedContentError(f"Unsupported content type {mime!r}")


def _read_text_until(response: httpx.Response, deadline: float, timeout_ms: int) -> str:
    chunks: List[str] = []
    for chunk in response.iter_text():
        if time.monotonic() > deadline:
            raise httpx.ReadTimeout(
                f"Response body not received within {timeout_ms} ms",
                request=response.request,
            )
        chunks.append(chunk)
    return "".join(chunks)


def scrape_with_tier1(url: str, options: Optional[ScraperOptions] = None) -> Tier1Page:
    """Fetch *url* over HTTP and parse it without executing scripts.

    Raises:
        httpx.HTTPStatusError: If the server returns a 4xx/5xx status code.
        httpx.HTTPError: On connection failures and timeouts.
        UnsupportedContentError: If the response is not an HTML document.
    """
    options = options or ScraperOptions()
    timeout_ms = options.timeout_ms or settings.tier1_timeout_ms
    timeout = timeout_ms / 1000
    # httpx timeouts apply per connect/read; this one bounds the whole fetch.
    deadline = time.monotonic() + timeout

    with httpx.Client(
        headers=_request_headers(),
        timeout=timeout,
        follow_redirects=True,
    ) as client:
        with client.stream("GET", url) as response:
            response.raise_for_status()
            _check_content_type(response)
            html = _read_text_until(response, deadline, timeout_ms)
            final_url = str(response.url)

    logger.debug("Tier 1 fetched %s (HTTP %d, %d bytes)", final_url, response.status_code, len(html))
    return parse_html(html, final_url)


class Tier1Extractor(PageExtractor):
    """:class:`PageExtractor` adapter over :func:`scrape_with_tier1`."""

    @property
    def tier(self) -> int:
        return 1

    def extract(self, url: str, options: ScraperOptions) -> Tier1Page:
        return scrape_with_tier1(url, options)
