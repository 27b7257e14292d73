"""Product-photo filtering.

Pure functions that decide which scraped images look like product/hero photos
rather than icons, tracking pixels, banners or decorative SVGs, and pick the
single best candidate.  Nothing here performs I/O or raises.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional
from urllib.parse import urlsplit

from docgen.scraper.models import DEFAULT_PHOTO_FILTER, PhotoFilterCriteria, ScrapedImage

# ---------------------------------------------------------------------------
# URL-based exclusions
# ---------------------------------------------------------------------------
# Matched against path + query.  Directory names must be whole segments so
# that e.g. ``/products/adapter.jpg`` survives the ``/ad/`` rule.
_EXCLUDED_PATH_PATTERNS = [
    re.compile(r"/icons?/", re.IGNORECASE),
    re.compile(r"/logos?/", re.IGNORECASE),
    re.compile(r"/sprites?/", re.IGNORECASE),
    re.compile(r"/avatars?/", re.IGNORECASE),
    re.compile(r"/badges?/", re.IGNORECASE),
    re.compile(r"/banners?/", re.IGNORECASE),
    re.compile(r"/pixels?/", re.IGNORECASE),
    re.compile(r"/tracking/", re.IGNORECASE),
    re.compile(r"/ads?/", re.IGNORECASE),
    re.compile(r"\.svg(\?|$)", re.IGNORECASE),
    re.compile(r"1x1", re.IGNORECASE),
    re.compile(r"placeholder", re.IGNORECASE),
]

# ---------------------------------------------------------------------------
# Alt-text exclusions (applied to the stripped alt text)
# ---------------------------------------------------------------------------
_EXCLUDED_ALT_PATTERNS = [
    re.compile(r"^logo$", re.IGNORECASE),
    re.compile(r"^icon$", re.IGNORECASE),
    re.compile(r"^avatar$", re.IGNORECASE),
    re.compile(r"^spacer$", re.IGNORECASE),
    re.compile(r"^pixel$", re.IGNORECASE),
    re.compile(r"^tracking", re.IGNORECASE),
    re.compile(r"^advertisement", re.IGNORECASE),
]


def is_excluded_by_url(url: str) -> bool:
    """Return ``True`` if *url* looks like a UI or tracking asset.

    Empty, unparseable and non-absolute URLs are always excluded.
    """
    if not url:
        return True
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        return True
    if not parts.scheme or not parts.netloc:
        return True

    path_and_query = parts.path + (f"?{parts.query}" if parts.query else "")
    return any(pattern.search(path_and_query) for pattern in _EXCLUDED_PATH_PATTERNS)


def is_excluded_by_alt(alt: str) -> bool:
    """Return ``True`` if the alt text marks the image as decoration.

    An empty alt says nothing about the image, so it never excludes.
    """
    trimmed = (alt or "").strip()
    if not trimmed:
        return False
    return any(pattern.search(trimmed) for pattern in _EXCLUDED_ALT_PATTERNS)


def meets_minimum_size(
    image: ScrapedImage,
    criteria: PhotoFilterCriteria = DEFAULT_PHOTO_FILTER,
) -> bool:
    """Return ``True`` if *image* is large enough and not too elongated.

    Images without both dimensions pass: we cannot reject what we cannot
    measure.
    """
    width, height = image.width, image.height
    if width is None or height is None:
        return True

    if width < criteria.min_width or height < criteria.min_height:
        return False
    if width * height < criteria.min_area:
        return False

    ratio = width / height
    return criteria.min_ratio <= ratio <= criteria.max_ratio


def is_product_photo(
    image: ScrapedImage,
    criteria: PhotoFilterCriteria = DEFAULT_PHOTO_FILTER,
) -> bool:
    """Return ``True`` if *image* survives the URL, alt-text and size checks."""
    if is_excluded_by_url(image.url):
        return False
    if is_excluded_by_alt(image.alt):
        return False
    return meets_minimum_size(image, criteria)


def filter_product_photos(
    images: Iterable[ScrapedImage],
    criteria: PhotoFilterCriteria = DEFAULT_PHOTO_FILTER,
    max_results: int = 5,
) -> List[ScrapedImage]:
    """Keep product-photo candidates in their original order, at most *max_results*."""
    kept: List[ScrapedImage] = []
    for image in images:
        if len(kept) >= max_results:
            break
        if is_product_photo(image, criteria):
            kept.append(image)
    return kept


def select_best_photo(
    images: Iterable[ScrapedImage],
    criteria: PhotoFilterCriteria = DEFAULT_PHOTO_FILTER,
) -> Optional[ScrapedImage]:
    """Pick the single best product photo, or ``None`` if nothing qualifies.

    Measured candidates beat unmeasured ones and the largest area wins; on a
    tie the earlier image is kept.  With no measured candidates the first
    survivor is returned.
    """
    candidates = [img for img in images if is_product_photo(img, criteria)]
    if not candidates:
        return None

    measured = [img for img in candidates if img.has_dimensions]
    if measured:
        # sorted() is stable, so equal areas keep document order.
        return sorted(measured, key=lambda img: img.area, reverse=True)[0]

    return candidates[0]
