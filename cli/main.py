"""Document-generator CLI — entry-point for backend operations.

Usage:
    python cli/main.py --help

Command groups:
    scrape    → two-tier product-page scraper
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from docgen.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any working
# directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import json
import logging
from typing import List, Optional

import typer

from docgen.scraper import (
    ScrapedPage,
    ScraperError,
    ScraperOptions,
    parse_html,
    scrape,
    scrape_many,
    select_best_photo,
)

app = typer.Typer(
    name="docgen",
    help="Document-generator backend CLI.",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Configure logging for every sub-command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# Scraper commands
# ---------------------------------------------------------------------------
scrape_app = typer.Typer(help="Product-page scraping.", no_args_is_help=True)
app.add_typer(scrape_app, name="scrape")


def _echo_page(page: ScrapedPage, as_json: bool) -> None:
    if as_json:
        typer.echo(json.dumps(page.to_dict(), indent=2, ensure_ascii=False))
        return

    best = select_best_photo(page.images)
    typer.echo(f"[scrape] URL         : {page.url}")
    typer.echo(f"[scrape] Tier        : {page.tier}{' (JS rendered)' if page.js_rendered else ''}")
    typer.echo(f"[scrape] Title       : {page.title or '(none)'}")
    typer.echo(f"[scrape] Description : {page.description or '(none)'}")
    typer.echo(f"[scrape] OG image    : {page.og_image or '(none)'}")
    typer.echo(f"[scrape] Best photo  : {best.url if best else '(none)'}")
    typer.echo(f"[scrape] Images      : {len(page.images)}")
    typer.echo("")
    typer.echo(page.body_text)


@scrape_app.command("page")
def scrape_page(
    url: str = typer.Option(..., help="Product page URL to scrape."),
    timeout_ms: Optional[int] = typer.Option(None, help="Fetch/navigation deadline in ms."),
    skip_tier2: bool = typer.Option(False, "--skip-tier2", help="Never launch a browser."),
    as_json: bool = typer.Option(False, "--json", help="Print the page record as JSON."),
) -> None:
    """Scrape a single URL and print the normalised page record."""
    options = ScraperOptions(timeout_ms=timeout_ms, skip_tier2=skip_tier2)
    try:
        page = scrape(url, options)
    except ScraperError as exc:
        typer.secho(f"[scrape] ✗ {exc.url} (tier {exc.tier}): {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    _echo_page(page, as_json)


@scrape_app.command("batch")
def scrape_batch(
    urls: List[str] = typer.Option(..., "--url", help="URL to scrape (repeatable)."),
    workers: Optional[int] = typer.Option(None, help="Maximum concurrent scrapes."),
    timeout_ms: Optional[int] = typer.Option(None, help="Fetch/navigation deadline in ms, per URL."),
    skip_tier2: bool = typer.Option(False, "--skip-tier2", help="Never launch a browser."),
) -> None:
    """Scrape several URLs in parallel and print one status line per URL."""
    options = ScraperOptions(timeout_ms=timeout_ms, skip_tier2=skip_tier2)
    results = scrape_many(urls, options, max_workers=workers)

    failed = 0
    for result in results:
        if result.ok:
            page = result.page
            typer.echo(f"[scrape] ✓ tier {page.tier}  {result.url}  title={page.title!r}")
        else:
            failed += 1
            typer.echo(f"[scrape] ✗ {result.url}  {result.error}")

    if failed:
        typer.echo(f"[scrape] {failed}/{len(results)} URL(s) failed.")
        raise typer.Exit(code=1)


@scrape_app.command("parse")
def scrape_parse(
    file: Path = typer.Option(..., exists=True, dir_okay=False, help="Local HTML file."),
    url: str = typer.Option(..., help="URL the HTML was served from (for resolving links)."),
    as_json: bool = typer.Option(False, "--json", help="Print the page record as JSON."),
) -> None:
    """Run the Tier 1 parser over a saved HTML file (no network)."""
    html = file.read_text(encoding="utf-8", errors="replace")
    page = parse_html(html, url)
    _echo_page(page, as_json)


if __name__ == "__main__":
    app()
