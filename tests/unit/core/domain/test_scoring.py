"""Tests for relevance scoring."""

from datetime import UTC, datetime, timedelta

import pytest

from memorystream.core.domain.config_schema import VaultSettings
from memorystream.core.domain.scoring import (
    RelevanceScorer,
    ScorableMemory,
    SearchContext,
)

NOW = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)


def _memory(
    content: str = "Meeting about budget",
    tags: tuple[str, ...] = ("budget",),
    age: timedelta = timedelta(0),
    access_count: int = 0,
) -> ScorableMemory:
    return ScorableMemory(
        content=content,
        tags=tags,
        timestamp=NOW - age,
        access_count=access_count,
    )


class TestSearchContext:
    """Tests for SearchContext.build."""

    def test_tokenizes_query_on_whitespace(self) -> None:
        ctx = SearchContext.build("Budget  Meeting\tQ3")
        assert ctx.keywords == ("budget", "meeting", "q3")

    def test_merges_caller_keywords_after_query(self) -> None:
        ctx = SearchContext.build("budget", {"keywords": ["Finance", "budget", " "]})
        assert ctx.keywords == ("budget", "finance", "budget")

    def test_keeps_repeated_query_tokens(self) -> None:
        ctx = SearchContext.build("Budget budget report")
        assert ctx.keywords == ("budget", "budget", "report")

    def test_keeps_extra_context_fields(self) -> None:
        ctx = SearchContext.build("budget", {"keywords": ["x"], "platform": "chat"})
        assert ctx.extra == {"platform": "chat"}

    def test_empty_query_and_context(self) -> None:
        assert SearchContext.build("").keywords == ()


class TestRecencyTerm:
    """Tests for the recency component."""

    def test_brand_new_memory_scores_one(self) -> None:
        scorer = RelevanceScorer()
        assert scorer.recency_term(NOW, NOW) == pytest.approx(1.0)

    def test_decays_linearly(self) -> None:
        scorer = RelevanceScorer()
        assert scorer.recency_term(NOW - timedelta(days=4), NOW) == pytest.approx(0.6)

    def test_zero_after_window(self) -> None:
        scorer = RelevanceScorer()
        assert scorer.recency_term(NOW - timedelta(days=10), NOW) == 0.0
        assert scorer.recency_term(NOW - timedelta(days=45), NOW) == 0.0

    def test_future_timestamp_capped_at_one(self) -> None:
        scorer = RelevanceScorer()
        assert scorer.recency_term(NOW + timedelta(days=3), NOW) == pytest.approx(1.0)

    def test_newer_is_never_lower(self) -> None:
        scorer = RelevanceScorer()
        ages = [timedelta(hours=h) for h in range(0, 24 * 12, 7)]
        terms = [scorer.recency_term(NOW - age, NOW) for age in ages]
        assert terms == sorted(terms, reverse=True)


class TestFrequencyTerm:
    """Tests for the frequency component."""

    def test_uncapped_by_default(self) -> None:
        scorer = RelevanceScorer()
        assert scorer.frequency_term(0) == 0.0
        assert scorer.frequency_term(10) == pytest.approx(0.5)
        assert scorer.frequency_term(400) == pytest.approx(20.0)

    def test_optional_cap(self) -> None:
        scorer = RelevanceScorer(VaultSettings(frequency_cap=1.0))
        assert scorer.frequency_term(400) == pytest.approx(1.0)


class TestContextTerm:
    """Tests for the keyword overlap component."""

    def test_no_keywords_contributes_nothing(self) -> None:
        scorer = RelevanceScorer()
        assert scorer.context_term("anything", ["tag"], ()) == 0.0

    def test_full_match(self) -> None:
        scorer = RelevanceScorer()
        assert scorer.context_term("Meeting about budget", [], ["budget"]) == 5.0

    def test_partial_match_is_fraction(self) -> None:
        scorer = RelevanceScorer()
        term = scorer.context_term("Meeting about budget", [], ["budget", "family"])
        assert term == pytest.approx(2.5)

    def test_matches_tags_case_insensitively(self) -> None:
        scorer = RelevanceScorer()
        assert scorer.context_term("Birthday reminder", ["Family"], ["FAMILY"]) == 5.0

    def test_substring_match(self) -> None:
        scorer = RelevanceScorer()
        assert scorer.context_term("budgeting session", [], ["budget"]) == 5.0


class TestScore:
    """Tests for the combined score."""

    def test_sums_terms(self) -> None:
        scorer = RelevanceScorer()
        memory = _memory(age=timedelta(days=5), access_count=4)
        ctx = SearchContext.build("budget")
        # 0.5 recency + 0.2 frequency + 5.0 context
        assert scorer.score(memory, ctx, NOW) == pytest.approx(5.7)

    def test_clamped_to_ten(self) -> None:
        scorer = RelevanceScorer()
        memory = _memory(access_count=1000)
        assert scorer.score(memory, SearchContext.build("budget"), NOW) == 10.0

    def test_breakdown_matches_score(self) -> None:
        scorer = RelevanceScorer()
        memory = _memory(age=timedelta(days=2), access_count=3)
        ctx = SearchContext.build("budget meeting")
        breakdown = scorer.breakdown(memory, ctx, NOW)
        assert breakdown.recency == pytest.approx(0.8)
        assert breakdown.frequency == pytest.approx(0.15)
        assert breakdown.context == pytest.approx(5.0)
        assert breakdown.total == scorer.score(memory, ctx, NOW)

    @pytest.mark.parametrize("access_count", [0, 1, 7, 50, 10_000])
    @pytest.mark.parametrize("age_days", [0, 0.5, 3, 9.99, 30])
    @pytest.mark.parametrize("query", ["", "budget", "budget family", "zzz"])
    def test_score_is_bounded(self, access_count: int, age_days: float, query: str) -> None:
        scorer = RelevanceScorer()
        memory = _memory(age=timedelta(days=age_days), access_count=access_count)
        score = scorer.score(memory, SearchContext.build(query), NOW)
        assert 0.0 <= score <= 10.0

    def test_repeated_keyword_counts_twice(self) -> None:
        scorer = RelevanceScorer()
        memory = _memory(age=timedelta(days=30))
        ctx = SearchContext.build("budget budget report")
        # two of three keywords match
        assert scorer.score(memory, ctx, NOW) == pytest.approx(10 / 3)

    def test_recency_monotonic_for_identical_memories(self) -> None:
        scorer = RelevanceScorer()
        ctx = SearchContext.build("budget")
        newer = scorer.breakdown(_memory(age=timedelta(days=1)), ctx, NOW)
        older = scorer.breakdown(_memory(age=timedelta(days=6)), ctx, NOW)
        assert newer.recency >= older.recency
        assert newer.total >= older.total
