"""Scraper package — two-tier product-page scraping.

Consumers should import from here rather than from the tier modules.
"""

from docgen.scraper.batch import BatchResult, scrape_many
from docgen.scraper.models import (
    DEFAULT_PHOTO_FILTER,
    PhotoFilterCriteria,
    ScrapedImage,
    ScrapedPage,
    ScraperError,
    ScraperOptions,
)
from docgen.scraper.photo_filter import filter_product_photos, select_best_photo
from docgen.scraper.service import ScraperService, scrape
from docgen.scraper.tier1 import parse_html

__all__ = [
    "scrape",
    "scrape_many",
    "parse_html",
    "filter_product_photos",
    "select_best_photo",
    "ScraperService",
    "BatchResult",
    "ScrapedImage",
    "ScrapedPage",
    "ScraperOptions",
    "ScraperError",
    "PhotoFilterCriteria",
    "DEFAULT_PHOTO_FILTER",
]
