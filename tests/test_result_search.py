"""
Tests for the name search matcher.

Covers term extraction, scoring, best-match selection and the full search
flow against an in-memory repository.
"""

import pytest

from conftest import BrokenRankRepository, BrokenRepository, InMemoryResultRepository
from handlers.result_errors import QueryError, RepositoryConnectionError, RepositoryError, ValidationError
from handlers.result_models import ResultRecord
from handlers.result_search import MAX_CANDIDATES, extract_terms, pick_best_match, score_candidate, search


# =============================================================================
# Term extraction
# =============================================================================

class TestExtractTerms:
    """Tests for extract_terms."""

    def test_splits_normalized_words(self):
        assert extract_terms("  أحمد   محمد ") == ["احمد", "محمد"]

    def test_keeps_all_words(self):
        assert extract_terms("محمد بن عبد الله") == ["محمد", "بن", "عبد", "الله"]

    def test_single_short_word_rejected(self):
        with pytest.raises(ValidationError):
            extract_terms("ab")

    def test_empty_rejected(self):
        with pytest.raises(ValidationError):
            extract_terms("   ")

    def test_single_three_letter_word_accepted(self):
        assert extract_terms("abc") == ["abc"]

    def test_two_short_words_accepted(self):
        """The length rule only applies to a single word."""
        assert extract_terms("ab cd") == ["ab", "cd"]


# =============================================================================
# Scoring
# =============================================================================

class TestScoreCandidate:
    """Tests for score_candidate."""

    def test_scenario_scores(self, scenario_records):
        terms = ["احمد", "محمد"]
        q = "احمد محمد"
        exact, other, third = scenario_records
        # 10 + 10 + 50 + 20 (the normalized name also starts with the first term)
        assert score_candidate(exact.name, terms, q) == 90
        assert score_candidate(other.name, terms, q) == 30
        assert score_candidate(third.name, terms, q) == 10

    def test_no_overlap_scores_zero(self):
        assert score_candidate("خالد", ["احمد"], "احمد") == 0

    def test_scores_are_additive(self):
        """A long query can outgrow the full-match bonus; nothing is capped."""
        terms = ["a1", "b2", "c3", "d4", "e5", "f6"]
        assert score_candidate("a1 b2 c3 d4 e5 f6", terms, "a1 b2 c3 d4 e5 f6") == 60 + 50 + 20


class TestPickBestMatch:
    """Tests for pick_best_match."""

    def test_tie_keeps_first(self):
        first = ResultRecord(identifier=10, name="زيد احمد", category="3", grade=50)
        second = ResultRecord(identifier=11, name="عمرو احمد", category="3", grade=99)
        best = pick_best_match([first, second], ["احمد"], "احمد")
        assert best is first

    def test_all_zero_keeps_first(self):
        a = ResultRecord(identifier=1, name="x", category="3", grade=1)
        b = ResultRecord(identifier=2, name="y", category="3", grade=2)
        assert pick_best_match([a, b], ["zzz"], "zzz") is a

    def test_full_match_beats_substring_match(self):
        partial = ResultRecord(identifier=1, name="علي حسن علي", category="5", grade=80)
        exact = ResultRecord(identifier=2, name="علي حسن", category="5", grade=70)
        best = pick_best_match([partial, exact], ["علي", "حسن"], "علي حسن")
        assert best is exact

    def test_empty_candidates(self):
        assert pick_best_match([], ["abc"], "abc") is None


# =============================================================================
# Search
# =============================================================================

class TestSearch:
    """Tests for the search flow."""

    def test_end_to_end_scenario(self, repo):
        result = search("احمد محمد", repo)

        assert result is not None
        assert result.identifier == 1
        assert result.name == "أحمد محمد"
        assert result.category == "5"
        assert result.grade == 90
        assert result.rank == 2
        assert result.rank_degraded is False

    def test_rank_query_follows_match(self, repo):
        search("احمد محمد", repo)
        assert repo.calls[0] == ("query", ("احمد", "محمد"), 10)
        assert repo.calls[1] == ("count", "5", 90)

    def test_short_query_never_reaches_repository(self, repo):
        with pytest.raises(ValidationError):
            search("ab", repo)
        assert repo.calls == []

    def test_short_query_rejected_even_for_broken_repository(self):
        broken = BrokenRepository()
        with pytest.raises(ValidationError):
            search("ab", broken)
        assert broken.calls == []

    def test_three_letters_pass_validation(self):
        empty = InMemoryResultRepository()
        assert search("abc", empty) is None
        assert empty.calls == [("query", ("abc",), 10)]

    def test_no_candidates_returns_none(self, repo):
        assert search("خالد وليد", repo) is None

    def test_candidate_limit(self):
        records = [ResultRecord(identifier=i, name=f"محمد {i}", category="3", grade=i) for i in range(1, 20)]
        repo = InMemoryResultRepository(records)
        search("محمد", repo, limit=10)
        assert repo.calls[0] == ("query", ("محمد",), 10)

    def test_candidate_limit_is_capped(self):
        """A larger limit still asks the repository for at most ten candidates."""
        records = [ResultRecord(identifier=i, name=f"محمد {i}", category="3", grade=i) for i in range(1, 20)]
        repo = InMemoryResultRepository(records)
        search("محمد", repo, limit=50)
        assert repo.calls[0] == ("query", ("محمد",), MAX_CANDIDATES)

    def test_hamza_insensitive_query(self, repo):
        """A query with hamza finds the record stored without it and vice versa."""
        result = search("أحمد محمود", repo)
        assert result.identifier == 2
        assert result.rank == 1

    def test_repository_error_is_propagated(self):
        with pytest.raises(RepositoryConnectionError):
            search("احمد محمد", BrokenRepository())

    def test_unexpected_error_is_wrapped(self):
        cause = OSError("socket closed")
        with pytest.raises(RepositoryError) as exc:
            search("احمد محمد", BrokenRepository(error=cause))
        assert exc.value.cause is cause

    def test_rank_failure_degrades_to_one(self, scenario_records, caplog):
        repo = BrokenRankRepository(scenario_records)
        with caplog.at_level("WARNING"):
            result = search("احمد محمد", repo)

        assert result.identifier == 1
        assert result.rank == 1
        assert result.rank_degraded is True
        assert "Rank lookup failed" in caplog.text

    def test_query_error_type(self):
        with pytest.raises(QueryError):
            search("احمد محمد", BrokenRepository(error=QueryError("bad filter")))
