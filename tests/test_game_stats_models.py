#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Test suite for game stats result models.
Validates value cleaning, result creation, serialization, and helpers.
"""
import json
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from pydantic import ValidationError

from core.models.game_stats import (
    NOT_FOUND,
    GameStats,
    ScrapeFailure,
    BatchSummary,
    clean_number,
    create_game_stats,
    create_scrape_failure,
    is_success,
    is_failure,
    to_dict,
    results_to_json,
)


def test_clean_number():
    """Test separator stripping, trimming and the missing-value sentinel."""
    print("\n=== Test 1: Number Cleaning ===")

    assert clean_number("1,234,567") == "1234567"
    assert clean_number(" 42 ") == "42"
    assert clean_number("\n 12,000\t") == "12000"
    assert clean_number(None) == NOT_FOUND
    assert clean_number("") == NOT_FOUND
    assert clean_number("   ") == NOT_FOUND
    assert NOT_FOUND == "Not found"

    print("✓ Number cleaning test passed")


def test_clean_number_idempotent():
    """Cleaning a cleaned value changes nothing."""
    print("\n=== Test 2: Cleaning Idempotence ===")

    for raw in ["1,234,567", " 42 ", "0", None, "", "  ", "Not found", "9,9,9"]:
        once = clean_number(raw)
        assert clean_number(once) == once, f"Not idempotent for {raw!r}"

    print("✓ Cleaning idempotence test passed")


def test_game_stats_creation():
    """Test GameStats creation with factory function."""
    print("\n=== Test 3: GameStats Creation ===")

    stats = create_game_stats(
        game_id="174430",
        title="Gloomhaven",
        forum_posts="12,345",
        all_time_plays=" 98,765 ",
        prev_owned=None,
    )

    assert stats.id == "174430"
    assert stats.title == "Gloomhaven"
    assert stats.forum_posts == "12345"
    assert stats.all_time_plays == "98765"
    assert stats.prev_owned == NOT_FOUND
    assert is_success(stats)
    assert not is_failure(stats)

    print("✓ GameStats creation test passed")


def test_game_stats_requires_title():
    """An empty title is rejected."""
    print("\n=== Test 4: Title Validation ===")

    try:
        GameStats(id="1", title="", forum_posts="1", all_time_plays="1", prev_owned="1")
    except ValidationError:
        print("✓ Empty title rejected")
    else:
        raise AssertionError("Empty title should be rejected")


def test_results_are_immutable():
    """Results cannot be changed after creation."""
    print("\n=== Test 5: Immutability ===")

    stats = create_game_stats("1", "Arcs", "1", "2", "3")
    try:
        stats.title = "Other"
    except ValidationError:
        print("✓ GameStats is frozen")
    else:
        raise AssertionError("GameStats should be frozen")


def test_scrape_failure_creation():
    """Test ScrapeFailure from messages and exceptions."""
    print("\n=== Test 6: ScrapeFailure Creation ===")

    failure = create_scrape_failure("badid", ValueError("page exploded"))
    assert failure.id == "badid"
    assert failure.error == "page exploded"
    assert is_failure(failure)
    assert not is_success(failure)

    # Exceptions without a message fall back to the class name
    failure = create_scrape_failure("badid", KeyError())
    assert failure.error == "KeyError"

    failure = create_scrape_failure("badid", "Cancelled before processing")
    assert failure.error == "Cancelled before processing"

    # Browser errors carry a call log after the first line
    class BrowserError(Exception):
        def __init__(self, message):
            super().__init__(message)
            self.message = message

    error = BrowserError(
        "Timeout 60000ms exceeded.\n"
        "Call log:\n"
        "  - waiting for locator(\".game-stats\") to be visible"
    )
    failure = create_scrape_failure("badid", error)
    assert failure.error == "Timeout 60000ms exceeded."

    failure = create_scrape_failure("badid", "\n\nnet::ERR_ABORTED\nat https://example")
    assert failure.error == "net::ERR_ABORTED"

    try:
        ScrapeFailure(id="x", error="")
    except ValidationError:
        pass
    else:
        raise AssertionError("Empty error should be rejected")

    print("✓ ScrapeFailure creation test passed")


def test_serialization():
    """Output uses camelCase keys and exactly the documented fields."""
    print("\n=== Test 7: Serialization ===")

    stats = create_game_stats("359871", "Arcs", "1,834", "21,520", "412")
    failure = create_scrape_failure("badid", "Timeout 60000ms exceeded")

    assert to_dict(stats) == {
        "id": "359871",
        "title": "Arcs",
        "forumPosts": "1834",
        "allTimePlays": "21520",
        "prevOwned": "412",
    }
    assert to_dict(failure) == {"id": "badid", "error": "Timeout 60000ms exceeded"}

    decoded = json.loads(results_to_json([stats, failure]))
    assert [d["id"] for d in decoded] == ["359871", "badid"]
    assert "error" not in decoded[0]
    assert "title" not in decoded[1]

    compact = results_to_json([stats], indent=None)
    assert "\n" not in compact

    assert results_to_json([]) == "[]"

    # Accepts camelCase input too
    parsed = GameStats.model_validate(decoded[0])
    assert parsed == stats

    print("✓ Serialization test passed")


def test_batch_summary():
    """Summary counts successes and failures."""
    print("\n=== Test 8: Batch Summary ===")

    results = [
        create_game_stats("1", "A", "1", "1", "1"),
        create_scrape_failure("2", "boom"),
        create_game_stats("3", "C", None, None, None),
    ]
    summary = BatchSummary.from_results(results)
    assert summary.total == 3
    assert summary.succeeded == 2
    assert summary.failed == 1

    empty = BatchSummary.from_results([])
    assert (empty.total, empty.succeeded, empty.failed) == (0, 0, 0)

    print("✓ Batch summary test passed")


def main():
    """Run all tests."""
    print("=" * 60)
    print("GAME STATS MODEL TESTS")
    print("=" * 60)

    tests = [
        test_clean_number,
        test_clean_number_idempotent,
        test_game_stats_creation,
        test_game_stats_requires_title,
        test_results_are_immutable,
        test_scrape_failure_creation,
        test_serialization,
        test_batch_summary,
    ]

    passed = 0
    failed = 0

    for test in tests:
        try:
            test()
            passed += 1
        except AssertionError as e:
            failed += 1
            print(f"\n❌ FAILED: {test.__name__}")
            print(f"   Error: {e}")
        except Exception as e:
            failed += 1
            print(f"\n❌ ERROR: {test.__name__}")
            print(f"   Exception: {type(e).__name__}: {e}")

    print("\n" + "=" * 60)
    print(f"SUMMARY: {passed} passed, {failed} failed")
    print("=" * 60)

    return 0 if failed == 0 else 1


if __name__ == "__main__":
    exit(main())
