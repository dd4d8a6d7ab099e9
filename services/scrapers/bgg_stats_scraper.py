#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
BoardGameGeek Stats Scraper - Title, forum posts, plays and previous owners per game.

Drives a headless Chromium through three pages per game ID and prints a JSON
array with one entry per ID, in input order.

Architecture:
- One browser for the whole run, one page per game (closed before the next)
- Games processed strictly one after another
- Each page is read as an HTML snapshot once its content is visible, then
  parsed with BeautifulSoup
- Any failure is confined to its game and reported as {"id", "error"}

URL Structure:
- Game page:  /boardgame/{id}  (redirects to /boardgame/{id}/{slug})
- Forums:     /boardgame/{id}/{slug}/forums/0
- Stats:      /boardgame/{id}/{slug}/stats

Usage:
    # Default game list
    python services/scrapers/bgg_stats_scraper.py

    # Specific games, visible browser
    python services/scrapers/bgg_stats_scraper.py 174430 359871 --headed

    # IDs from stdin
    cat ids.txt | python services/scrapers/bgg_stats_scraper.py --stdin
"""
import argparse
import signal
import sys
import threading
import uuid
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

# Add project root to path
project_root = Path(__file__).resolve().parent.parent.parent
sys.path.insert(0, str(project_root))

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from core.browser import BrowserOptions, BrowserSession, BrowserLaunchError, open_session
from core.config import config
from core.logging import get_logger, log_execution_time
from core.models.game_stats import (
    BatchSummary,
    ExtractionResult,
    create_game_stats,
    create_scrape_failure,
    is_success,
    results_to_json,
)

logger = get_logger("bgg-scraper")

# ============================================================================
# CONFIGURATION
# ============================================================================

DEFAULT_GAME_IDS = ["359871", "174430"]  # Arcs, Gloomhaven

TITLE_SELECTOR = "h1 > a"
# Rendered in both toolbars; the last occurrence holds the count
FORUM_POSTS_SELECTOR = "div.panel-body-toolbar-count strong.ng-binding"
STATS_CONTAINER_SELECTOR = ".game-stats"
STAT_TITLE_SELECTOR = ".outline-item-title"

STAT_LABELS = {
    "all_time_plays": "All Time Plays",
    "prev_owned": "Prev. Owned",
}

CANCELLED_ERROR = "Cancelled before processing"

# Elements whose text the browser does not render
NON_RENDERED_TAGS = {"script", "style", "template", "noscript"}
HIDDEN_CLASSES = {"ng-hide"}


class ScrapeError(Exception):
    """Base error for a game that could not be scraped."""


class MissingTitleError(ScrapeError):
    """Raised when the game page has no title heading."""


# ============================================================================
# URL TEMPLATES
# ============================================================================

def detail_url(game_id: str, base_url: Optional[str] = None) -> str:
    """Game page URL for an ID (before the site's slug redirect)."""
    base = (base_url or config.BGG_BASE_URL).rstrip("/")
    return f"{base}/{game_id}"


def forum_url(canonical_url: str) -> str:
    return f"{canonical_url.rstrip('/')}/forums/0"


def stats_url(canonical_url: str) -> str:
    return f"{canonical_url.rstrip('/')}/stats"


# ============================================================================
# HTML PARSING
# ============================================================================

def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


def _is_hidden(tag: Tag) -> bool:
    if tag.name in NON_RENDERED_TAGS or tag.has_attr("hidden"):
        return True
    if HIDDEN_CLASSES.intersection(tag.get("class") or []):
        return True
    style = (tag.get("style") or "").replace(" ", "").lower()
    return "display:none" in style or "visibility:hidden" in style


def _collect_text(element: Tag, parts: List[str]):
    for child in element.children:
        if isinstance(child, Comment):
            continue
        if isinstance(child, NavigableString):
            parts.append(str(child))
        elif isinstance(child, Tag) and not _is_hidden(child):
            _collect_text(child, parts)


def visible_text(element: Tag) -> str:
    """
    Text of an element as the browser renders it.

    Hidden descendants are skipped and runs of whitespace collapse to a single
    space, so a label wrapped across lines reads the same as on screen.
    """
    parts: List[str] = []
    _collect_text(element, parts)
    return " ".join("".join(parts).split())


def parse_title(html: str) -> str:
    """
    Extract the game title from the game page.

    Raises:
        MissingTitleError: If there is no non-empty title link
    """
    element = _soup(html).select_one(TITLE_SELECTOR)
    title = visible_text(element) if element else ""
    if not title:
        raise MissingTitleError(f"Game title not found (selector '{TITLE_SELECTOR}')")
    return title


def parse_forum_posts(html: str) -> Optional[str]:
    """Text of the last forum post-count marker, or None if there is none."""
    elements = _soup(html).select(FORUM_POSTS_SELECTOR)
    if not elements:
        return None
    return visible_text(elements[-1])


def find_stat_by_title(html, title: str) -> Optional[str]:
    """
    Find a stat value by its label on the stats page.

    Scans label elements for one whose visible text equals ``title`` exactly
    and returns the visible text of its next element sibling.

    Args:
        html: Page HTML or an already parsed BeautifulSoup document
        title: Label text, e.g. "All Time Plays"

    Returns:
        The value text, or None if no label matches
    """
    soup = html if isinstance(html, BeautifulSoup) else _soup(html)
    for label in soup.select(STAT_TITLE_SELECTOR):
        if visible_text(label) == title:
            value = label.find_next_sibling()
            return visible_text(value) if value is not None else None
    return None


def parse_stats(html: str) -> Dict[str, Optional[str]]:
    """Extract the raw stat values keyed by field name."""
    soup = _soup(html)
    return {field: find_stat_by_title(soup, label) for field, label in STAT_LABELS.items()}


# ============================================================================
# SCRAPING FUNCTIONS
# ============================================================================

def _extract_game_stats(page, game_id: str, timeout_ms: int) -> ExtractionResult:
    page.goto(detail_url(game_id), wait_until="networkidle")
    canonical_url = page.url
    logger.info(f"  - Found URL: {canonical_url}", extra={"game_id": game_id})

    title = parse_title(page.content())

    page.goto(forum_url(canonical_url), wait_until="networkidle")
    page.wait_for_selector(FORUM_POSTS_SELECTOR, state="visible", timeout=timeout_ms)
    forum_posts = parse_forum_posts(page.content())

    page.goto(stats_url(canonical_url), wait_until="networkidle")
    page.wait_for_selector(STATS_CONTAINER_SELECTOR, state="visible", timeout=timeout_ms)
    stats = parse_stats(page.content())

    return create_game_stats(
        game_id=game_id,
        title=title,
        forum_posts=forum_posts,
        all_time_plays=stats["all_time_plays"],
        prev_owned=stats["prev_owned"],
    )


def scrape_game_stats(session: BrowserSession, game_id: str) -> ExtractionResult:
    """
    Scrape one game's stats on a fresh page.

    Never raises: any navigation, wait or parsing error is returned as a
    ScrapeFailure for this game.
    """
    logger.info(f"Processing ID: {game_id}...", extra={"game_id": game_id})

    try:
        with session.new_page() as page:
            result = _extract_game_stats(page, game_id, session.default_timeout_ms)
    except Exception as e:
        failure = create_scrape_failure(game_id, e)
        logger.error(f"  - Error processing ID {game_id}: {failure.error}", extra={"game_id": game_id})
        logger.debug(f"Full error for {game_id}: {e}", extra={"game_id": game_id})
        return failure

    logger.info(
        f"  - Scraped '{result.title}'",
        extra={
            "game_id": game_id,
            "forum_posts": result.forum_posts,
            "all_time_plays": result.all_time_plays,
            "prev_owned": result.prev_owned,
        },
    )
    return result


def scrape_games(
    session: BrowserSession,
    game_ids: Sequence[str],
    should_stop: Optional[Callable[[], bool]] = None,
) -> List[ExtractionResult]:
    """
    Scrape games one at a time, in order, on a shared session.

    ``should_stop`` is checked before each game; once it returns True the
    remaining games are reported as cancelled failures.
    """
    results: List[ExtractionResult] = []
    cancelled = False

    for game_id in game_ids:
        if not cancelled and should_stop is not None and should_stop():
            cancelled = True
            logger.warning(
                "Cancellation requested, skipping remaining games",
                extra={"remaining": len(game_ids) - len(results)},
            )

        if cancelled:
            results.append(create_scrape_failure(game_id, CANCELLED_ERROR))
        else:
            results.append(scrape_game_stats(session, game_id))

    return results


@log_execution_time(logger)
def run_batch(
    game_ids: Sequence[str],
    options: Optional[BrowserOptions] = None,
    session_factory: Callable = open_session,
    should_stop: Optional[Callable[[], bool]] = None,
) -> List[ExtractionResult]:
    """
    Open one browser session and scrape all games on it.

    Raises:
        BrowserLaunchError: If the browser cannot be started
    """
    with session_factory(options or BrowserOptions.from_config()) as session:
        return scrape_games(session, game_ids, should_stop=should_stop)


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

def collect_game_ids(positional: Sequence[str], use_stdin: bool, stdin=None) -> List[str]:
    """
    Merge CLI and stdin IDs.

    The default list is used only when no IDs were passed and stdin was not
    requested; an empty stdin yields an empty batch.
    """
    if not positional and not use_stdin:
        return list(DEFAULT_GAME_IDS)
    game_ids = list(positional)
    if use_stdin:
        game_ids.extend((stdin or sys.stdin).read().split())
    return game_ids


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="BoardGameGeek Stats Scraper - forum posts, plays and previous owners",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Default game list
    python services/scrapers/bgg_stats_scraper.py

    # Specific games
    python services/scrapers/bgg_stats_scraper.py 174430 359871

    # IDs from a file, visible browser
    python services/scrapers/bgg_stats_scraper.py --stdin --headed < ids.txt
        """
    )

    parser.add_argument(
        "game_ids",
        nargs="*",
        help=f"BoardGameGeek game IDs (default: {' '.join(DEFAULT_GAME_IDS)})"
    )
    parser.add_argument(
        "--stdin",
        action="store_true",
        help="Also read whitespace-separated game IDs from stdin"
    )
    parser.add_argument(
        "--headed",
        action="store_true",
        help="Run browser in headed mode (for debugging)"
    )
    parser.add_argument(
        "--timeout-ms",
        type=int,
        default=None,
        help=f"Navigation and wait timeout in ms (default: {config.BGG_TIMEOUT_MS})"
    )
    parser.add_argument(
        "--compact",
        action="store_true",
        help="Print the JSON result on a single line"
    )
    return parser


def main(argv: Optional[Sequence[str]] = None, session_factory: Callable = open_session) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    session_id = str(uuid.uuid4())[:8]
    game_ids = collect_game_ids(args.game_ids, args.stdin)

    overrides = {}
    if args.headed:
        overrides["headless"] = False
    if args.timeout_ms is not None:
        overrides["default_timeout_ms"] = args.timeout_ms
    options = BrowserOptions.from_config(**overrides)

    # SIGTERM stops the run after the current game
    stop_event = threading.Event()
    previous_handler = None
    if threading.current_thread() is threading.main_thread():
        previous_handler = signal.signal(signal.SIGTERM, lambda signum, frame: stop_event.set())

    logger.info(
        "Starting scraper session",
        extra={
            "correlation_id": session_id,
            "game_count": len(game_ids),
            "headless": options.headless,
            "timeout_ms": options.default_timeout_ms,
        }
    )

    try:
        results = run_batch(
            game_ids,
            options=options,
            session_factory=session_factory,
            should_stop=stop_event.is_set,
        )

    except KeyboardInterrupt:
        logger.info("Scraper interrupted by user")
        return 130

    except BrowserLaunchError:
        logger.critical("Could not start browser", exc_info=True, extra={"correlation_id": session_id})
        return 1

    finally:
        if previous_handler is not None:
            signal.signal(signal.SIGTERM, previous_handler)

    summary = BatchSummary.from_results(results)
    logger.info(
        "Session completed",
        extra={
            "correlation_id": session_id,
            "total": summary.total,
            "succeeded": summary.succeeded,
            "failed": summary.failed,
        }
    )
    for result in results:
        if not is_success(result):
            logger.warning(f"Failed: {result.id} ({result.error})", extra={"game_id": result.id})

    print(results_to_json(results, indent=None if args.compact else 2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
