"""
Tests for Result Shaping Utilities
==================================
"""

from __future__ import annotations

import time

import pytest

from knowledge_consensus.domain.entities import Source, SourceCategory
from knowledge_consensus.domain.services.result_shaping import (
    deduplicate_sources,
    elapsed_ms_since,
    round_half_up,
    source_key,
    unique_in_order,
)


class TestDeduplicateSources:
    """Tests for source deduplication."""

    def test_same_url_and_category_collapse(self) -> None:
        first = Source(
            name="A", title="One", category=SourceCategory.ENCYCLOPEDIA, url="https://x/1"
        )
        second = Source(
            name="B", title="Two", category=SourceCategory.ENCYCLOPEDIA, url="https://x/1"
        )

        result = deduplicate_sources([first, second])

        assert result == [first]

    def test_same_url_different_category_kept(self) -> None:
        first = Source(name="A", title="T", category=SourceCategory.ENCYCLOPEDIA, url="u")
        second = Source(name="A", title="T", category=SourceCategory.GOVERNMENT, url="u")

        assert deduplicate_sources([first, second]) == [first, second]

    def test_title_used_without_url(self) -> None:
        first = Source(name="A", title="Aspirin", category=SourceCategory.NEWS)
        second = Source(name="B", title="Aspirin", category=SourceCategory.NEWS)
        third = Source(name="C", title="Ibuprofen", category=SourceCategory.NEWS)

        assert deduplicate_sources([first, second, third]) == [first, third]
        assert source_key(first) == ("Aspirin", SourceCategory.NEWS)

    def test_empty(self) -> None:
        assert deduplicate_sources([]) == []


class TestUniqueInOrder:
    """Tests for order-preserving union."""

    def test_first_occurrence_wins(self) -> None:
        assert unique_in_order(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]

    def test_generator_input(self) -> None:
        assert unique_in_order(x for x in ["e1", "e1"]) == ["e1"]


class TestRoundHalfUp:
    """Tests for half-up rounding."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(64.5, 65), (65.5, 66), (64.49, 64), (0.0, 0), (99.5, 100), (72.0, 72)],
    )
    def test_rounding(self, value: float, expected: int) -> None:
        assert round_half_up(value) == expected


def test_elapsed_ms_never_below_one() -> None:
    assert elapsed_ms_since(time.perf_counter()) >= 1.0
