"""Centralised settings for the document-generator backend.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (one level up from this package)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

_DESKTOP_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Deadlines (milliseconds)
    # ------------------------------------------------------------------
    tier1_timeout_ms: int = field(
        default_factory=lambda: int(os.environ.get("SCRAPER_TIER1_TIMEOUT_MS", "15000"))
    )
    tier2_timeout_ms: int = field(
        default_factory=lambda: int(os.environ.get("SCRAPER_TIER2_TIMEOUT_MS", "20000"))
    )
    network_idle_timeout_ms: int = field(
        default_factory=lambda: int(
            os.environ.get("SCRAPER_NETWORK_IDLE_TIMEOUT_MS", "5000")
        )
    )

    # ------------------------------------------------------------------
    # Browser identity
    # ------------------------------------------------------------------
    user_agent: str = field(
        default_factory=lambda: os.environ.get("SCRAPER_USER_AGENT", _DESKTOP_UA)
    )
    viewport_width: int = field(
        default_factory=lambda: int(os.environ.get("SCRAPER_VIEWPORT_WIDTH", "1280"))
    )
    viewport_height: int = field(
        default_factory=lambda: int(os.environ.get("SCRAPER_VIEWPORT_HEIGHT", "900"))
    )
    headless: bool = field(
        default_factory=lambda: _env_bool("SCRAPER_HEADLESS", "true")
    )

    # ------------------------------------------------------------------
    # Output shaping
    # ------------------------------------------------------------------
    body_text_limit: int = field(
        default_factory=lambda: int(os.environ.get("SCRAPER_BODY_TEXT_LIMIT", "5000"))
    )
    max_images: int = field(
        default_factory=lambda: int(os.environ.get("SCRAPER_MAX_IMAGES", "5"))
    )

    # ------------------------------------------------------------------
    # Batch scraping
    # ------------------------------------------------------------------
    max_concurrent_scrapes: int = field(
        default_factory=lambda: int(os.environ.get("SCRAPER_MAX_CONCURRENT", "3"))
    )


# Module-level singleton; import this everywhere:
#   from docgen.config import settings
settings = Settings()
