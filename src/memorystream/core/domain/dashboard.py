"""Per-user memory statistics for the dashboard."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Iterable

from memorystream.core.domain.memory import MemoryRecord


@dataclass(frozen=True)
class MemoryStats:
    """Aggregate counts over one owner's memories.

    Attributes:
        total: Number of memories
        by_type: Count per memory type value
        by_source: Count per source string
        recent_activity: Memories created within the recent window
    """

    total: int = 0
    by_type: dict[str, int] = field(default_factory=dict)
    by_source: dict[str, int] = field(default_factory=dict)
    recent_activity: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "by_type": dict(self.by_type),
            "by_source": dict(self.by_source),
            "recent_activity": self.recent_activity,
        }


def summarize_memories(
    records: Iterable[MemoryRecord],
    now: datetime,
    recent_days: int = 7,
) -> MemoryStats:
    """Count memories by type and source, plus those newer than the window."""
    cutoff = now - timedelta(days=recent_days)
    by_type: Counter[str] = Counter()
    by_source: Counter[str] = Counter()
    total = 0
    recent = 0
    for record in records:
        total += 1
        by_type[record.type.value] += 1
        by_source[record.source] += 1
        if record.timestamp > cutoff:
            recent += 1
    return MemoryStats(
        total=total,
        by_type=dict(by_type),
        by_source=dict(by_source),
        recent_activity=recent,
    )
