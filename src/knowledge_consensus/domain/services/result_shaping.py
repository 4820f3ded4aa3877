"""
Result Shaping Utilities
========================

Helpers shared by both consolidation strategies: source
deduplication, order-preserving unions, rounding and timing.
"""

from __future__ import annotations

import math
import time
from collections.abc import Hashable, Iterable
from typing import TypeVar

from knowledge_consensus.domain.entities import Source, SourceCategory

T = TypeVar("T", bound=Hashable)


def source_key(source: Source) -> tuple[str, SourceCategory]:
    """Identity of a source: its URL (or title when it has none) plus category."""
    return (source.url or source.title, source.category)


def deduplicate_sources(sources: Iterable[Source]) -> list[Source]:
    """
    Drop repeated sources, keeping the first occurrence.

    Args:
        sources: Sources in the order they were collected.

    Returns:
        Sources with unique ``(url or title, category)`` keys, order preserved.
    """
    seen: set[tuple[str, SourceCategory]] = set()
    unique: list[Source] = []
    for source in sources:
        key = source_key(source)
        if key in seen:
            continue
        seen.add(key)
        unique.append(source)
    return unique


def unique_in_order(items: Iterable[T]) -> list[T]:
    """Set-union that keeps first-occurrence order."""
    return list(dict.fromkeys(items))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for non-negatives."""
    return int(math.floor(value + 0.5))


def elapsed_ms_since(start: float) -> float:
    """Milliseconds since a ``time.perf_counter()`` mark, never below 1."""
    return max(1.0, (time.perf_counter() - start) * 1000)
