"""Relevance scoring for memory search.

The score is the sum of three non-negative terms, clamped to ``max_score``:

* recency: ``max(0, window - days_since_creation) * recency_weight``
* frequency: ``access_count * frequency_weight`` (optionally capped)
* context: fraction of context keywords found in content + tags, times
  ``context_weight``

Scores are a snapshot of one search call and are never stored on a record.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, Sequence

from memorystream.core.domain.config_schema import VaultSettings

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class ScorableMemory:
    """The fields of a memory the scorer looks at."""

    content: str
    tags: Sequence[str]
    timestamp: datetime
    access_count: int = 0


@dataclass(frozen=True)
class SearchContext:
    """Keywords to match plus any extra caller-supplied context fields."""

    keywords: tuple[str, ...] = ()
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def build(cls, query: str, context: dict[str, Any] | None = None) -> "SearchContext":
        """Merge whitespace tokens of ``query`` with ``context['keywords']``.

        Query tokens come first, then caller keywords; everything is
        lower-cased. Repeats are kept, so a repeated keyword weighs more in
        the overlap fraction. Only empty tokens are dropped.
        """
        context = dict(context or {})
        caller_keywords = context.pop("keywords", None) or []
        if isinstance(caller_keywords, str):
            caller_keywords = caller_keywords.split()
        tokens = (str(t).strip().lower() for t in [*query.lower().split(), *caller_keywords])
        return cls(keywords=tuple(t for t in tokens if t), extra=context)


@dataclass(frozen=True)
class ScoreBreakdown:
    """Individual score terms, useful for debugging rankings."""

    recency: float
    frequency: float
    context: float
    total: float


class RelevanceScorer:
    """Deterministic relevance function over memory metadata and context."""

    def __init__(self, settings: VaultSettings | None = None) -> None:
        self._settings = settings or VaultSettings()

    def score(
        self,
        memory: ScorableMemory,
        context: SearchContext,
        now: datetime | None = None,
    ) -> float:
        return self.breakdown(memory, context, now).total

    def breakdown(
        self,
        memory: ScorableMemory,
        context: SearchContext,
        now: datetime | None = None,
    ) -> ScoreBreakdown:
        now = now or datetime.now(timezone.utc)
        recency = self.recency_term(memory.timestamp, now)
        frequency = self.frequency_term(memory.access_count)
        overlap = self.context_term(memory.content, memory.tags, context.keywords)
        total = min(recency + frequency + overlap, self._settings.max_score)
        return ScoreBreakdown(
            recency=recency, frequency=frequency, context=overlap, total=total
        )

    def recency_term(self, timestamp: datetime, now: datetime) -> float:
        # Future timestamps count as brand new.
        days_since = max(0.0, (now - timestamp).total_seconds() / SECONDS_PER_DAY)
        remaining = max(0.0, self._settings.recency_window_days - days_since)
        return remaining * self._settings.recency_weight

    def frequency_term(self, access_count: int) -> float:
        term = max(0, access_count) * self._settings.frequency_weight
        if self._settings.frequency_cap is not None:
            term = min(term, self._settings.frequency_cap)
        return term

    def context_term(
        self,
        content: str,
        tags: Iterable[str],
        keywords: Sequence[str],
    ) -> float:
        if not keywords:
            return 0.0
        haystack = f"{content} {' '.join(tags)}".lower()
        lowered = [k.lower() for k in keywords]
        matches = sum(1 for keyword in lowered if keyword in haystack)
        return (matches / len(lowered)) * self._settings.context_weight
