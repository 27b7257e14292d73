"""Data models for the two-tier scraper."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import List, Literal, Optional, Union

TierLabel = Union[Literal[1], Literal[2], Literal["both"]]


@dataclass
class ScrapedImage:
    """A candidate image found on a page.

    ``url`` is always absolute; candidates whose ``src`` cannot be resolved
    are dropped before one of these is built.
    """

    url: str
    alt: str = ""
    width: Optional[int] = None
    height: Optional[int] = None

    @property
    def has_dimensions(self) -> bool:
        return self.width is not None and self.height is not None

    @property
    def area(self) -> int:
        if not self.has_dimensions:
            return 0
        return self.width * self.height


@dataclass(frozen=True)
class PhotoFilterCriteria:
    """Thresholds a measured image must meet to count as a product photo.

    All values are in pixels; the ratio bounds apply to ``width / height``.
    """

    min_width: int = 200
    min_height: int = 150
    min_area: int = 40_000
    min_ratio: float = 0.4
    max_ratio: float = 3.0


DEFAULT_PHOTO_FILTER = PhotoFilterCriteria()


@dataclass
class ScrapedPage:
    """The normalised record produced by either tier."""

    url: str
    title: str = ""
    description: str = ""
    og_image: Optional[str] = None
    images: List[ScrapedImage] = field(default_factory=list)
    body_text: str = ""
    tier: int = 1
    js_rendered: bool = False

    def to_dict(self) -> dict:
        """Return the public record as plain JSON-serialisable data."""
        return {
            "url": self.url,
            "title": self.title,
            "description": self.description,
            "og_image": self.og_image,
            "images": [asdict(img) for img in self.images],
            "body_text": self.body_text,
            "tier": self.tier,
            "js_rendered": self.js_rendered,
        }


@dataclass
class Tier1Page(ScrapedPage):
    """A Tier-1 record that may ask the orchestrator to escalate.

    ``needs_tier2`` is set when the markup looks like a client-rendered shell.
    It is not part of the public record, so it is left out of equality.
    """

    needs_tier2: bool = field(default=False, compare=False, repr=False)


@dataclass
class ScraperOptions:
    """Per-call knobs.  ``timeout_ms=None`` means "use the tier's default"."""

    timeout_ms: Optional[int] = None
    skip_tier2: bool = False


class ScraperError(Exception):
    """Raised when no tier produced a usable page for *url*."""

    def __init__(self, message: str, url: str, tier: TierLabel) -> None:
        super().__init__(message)
        self.message = message
        self.url = url
        self.tier = tier

    def __repr__(self) -> str:
        return f"ScraperError({self.message!r}, url={self.url!r}, tier={self.tier!r})"
