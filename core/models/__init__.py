"""
BGG Stats Core Models

Exports for per-game extraction results.
"""

from core.models.game_stats import (
    # Constants
    NOT_FOUND,
    # Models
    GameStats,
    ScrapeFailure,
    ExtractionResult,
    BatchSummary,
    # Cleaning
    clean_number,
    # Factory functions
    create_game_stats,
    create_scrape_failure,
    # Type guards
    is_success,
    is_failure,
    # Serialization
    to_dict,
    results_to_json,
)

__all__ = [
    "NOT_FOUND",
    "GameStats",
    "ScrapeFailure",
    "ExtractionResult",
    "BatchSummary",
    "clean_number",
    "create_game_stats",
    "create_scrape_failure",
    "is_success",
    "is_failure",
    "to_dict",
    "results_to_json",
]
