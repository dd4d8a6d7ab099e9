"""
Game Stats Schema - Per-game statistics scraped from BoardGameGeek.

Every scraped identifier produces exactly one result:
- GameStats: title plus three display-ready counters
- ScrapeFailure: the identifier and a description of what went wrong

Counters are kept as strings: the cleaned digits as rendered on the site, or
the "Not found" sentinel when the field is missing from the page.

Usage:
    stats = create_game_stats(
        game_id="174430",
        title="Gloomhaven",
        forum_posts="12,345",
        all_time_plays=" 98,765 ",
        prev_owned=None,
    )
    stats.forum_posts       # "12345"
    stats.prev_owned        # "Not found"

    to_dict(stats)
    # {"id": "174430", "title": "Gloomhaven", "forumPosts": "12345",
    #  "allTimePlays": "98765", "prevOwned": "Not found"}
"""
import json
from typing import Optional, Dict, Any, List, Union, Sequence
from pydantic import BaseModel, Field, ConfigDict


# ============================================================================
# CONSTANTS
# ============================================================================

NOT_FOUND = "Not found"

THOUSANDS_SEPARATOR = ","


# ============================================================================
# VALUE CLEANING
# ============================================================================

def clean_number(text: Optional[str]) -> str:
    """
    Clean a scraped counter for display.

    Strips thousands separators and surrounding whitespace. Missing or blank
    values become the NOT_FOUND sentinel. Idempotent.

    Examples:
        clean_number("1,234,567")  # "1234567"
        clean_number(" 42 ")       # "42"
        clean_number(None)         # "Not found"
    """
    if not text:
        return NOT_FOUND
    cleaned = text.replace(THOUSANDS_SEPARATOR, "").strip()
    return cleaned or NOT_FOUND


# ============================================================================
# RESULT MODELS
# ============================================================================

class GameStats(BaseModel):
    """
    Successful extraction for one game.

    Example Document:
        {
            "id": "359871",
            "title": "Arcs",
            "forumPosts": "1834",
            "allTimePlays": "21520",
            "prevOwned": "412"
        }
    """
    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
    )

    id: str = Field(
        ...,
        description="BoardGameGeek game ID as supplied by the caller"
    )

    title: str = Field(
        ...,
        min_length=1,
        description="Primary heading link text of the game page"
    )

    forum_posts: str = Field(
        ...,
        alias="forumPosts",
        description="Forum post count (digits) or 'Not found'"
    )

    all_time_plays: str = Field(
        ...,
        alias="allTimePlays",
        description="'All Time Plays' stat (digits) or 'Not found'"
    )

    prev_owned: str = Field(
        ...,
        alias="prevOwned",
        description="'Prev. Owned' stat (digits) or 'Not found'"
    )


class ScrapeFailure(BaseModel):
    """
    Failed extraction for one game.

    Example Document:
        {"id": "badid", "error": "Game title not found (selector 'h1 > a')"}
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(
        ...,
        description="BoardGameGeek game ID as supplied by the caller"
    )

    error: str = Field(
        ...,
        min_length=1,
        description="Description of the failure"
    )


ExtractionResult = Union[GameStats, ScrapeFailure]


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

def create_game_stats(
    game_id: str,
    title: str,
    forum_posts: Optional[str],
    all_time_plays: Optional[str],
    prev_owned: Optional[str],
) -> GameStats:
    """
    Build a GameStats record from raw scraped text.

    The three counters are passed through clean_number.
    """
    return GameStats(
        id=game_id,
        title=title,
        forum_posts=clean_number(forum_posts),
        all_time_plays=clean_number(all_time_plays),
        prev_owned=clean_number(prev_owned),
    )


def _first_line(text: str) -> str:
    for line in text.splitlines():
        if line.strip():
            return line.strip()
    return ""


def create_scrape_failure(game_id: str, error: Union[str, BaseException]) -> ScrapeFailure:
    """
    Build a ScrapeFailure from a message or exception.

    Only the first line is kept; Playwright appends a multi-line call log
    to its error messages.
    """
    if isinstance(error, BaseException):
        message = _first_line(getattr(error, "message", None) or str(error)) or type(error).__name__
    else:
        message = _first_line(error) or "Unknown error"
    return ScrapeFailure(id=game_id, error=message)


# ============================================================================
# TYPE GUARDS
# ============================================================================

def is_success(result: ExtractionResult) -> bool:
    """Check if a result is a successful extraction."""
    return isinstance(result, GameStats)


def is_failure(result: ExtractionResult) -> bool:
    """Check if a result is a failed extraction."""
    return isinstance(result, ScrapeFailure)


# ============================================================================
# SERIALIZATION
# ============================================================================

def to_dict(result: ExtractionResult) -> Dict[str, Any]:
    """Convert a result to its JSON output shape (camelCase keys)."""
    return result.model_dump(by_alias=True, mode="json")


def results_to_json(results: Sequence[ExtractionResult], indent: Optional[int] = 2) -> str:
    """Render a batch of results as a JSON array."""
    return json.dumps([to_dict(r) for r in results], indent=indent, ensure_ascii=False)


# ============================================================================
# SUMMARY
# ============================================================================

class BatchSummary(BaseModel):
    """Outcome counts for a batch run."""
    total: int = 0
    succeeded: int = 0
    failed: int = 0

    @classmethod
    def from_results(cls, results: List[ExtractionResult]) -> "BatchSummary":
        succeeded = sum(1 for r in results if is_success(r))
        return cls(
            total=len(results),
            succeeded=succeeded,
            failed=len(results) - succeeded,
        )
