"""Tests for fuzzy matching and ranking."""

import pytest

from finder.index import CorpusIndex
from finder.search import FuzzyMatcher, rank, score_text


def _is_subsequence(query: str, text: str) -> bool:
    it = iter(text.casefold())
    return all(ch in it for ch in query.casefold())


class TestScoreText:
    def test_non_subsequence_does_not_match(self):
        assert score_text("xyz", "the cat sat") is None

    def test_positions_spell_the_query(self):
        text = "Concatenate Strings"
        score, positions = score_text("cs", text)
        assert "".join(text[p] for p in positions).lower() == "cs"
        assert list(positions) == sorted(positions)

    def test_prefers_contiguous_occurrence_in_same_line(self):
        # greedy leftmost alignment would pick the scattered c..a..t
        text = "c a t and then cat"
        _, positions = score_text("cat", text)
        assert positions == (15, 16, 17)

    def test_contiguous_word_outranks_scattered_same_length(self):
        contiguous = "xxxxxxxxxxxxxxxxx cat"
        scattered = "c_a_t_xxxxxxxxxxxxxxx"
        assert len(contiguous) == len(scattered)
        assert score_text("cat", contiguous)[0] > score_text("cat", scattered)[0]

    def test_word_boundary_beats_mid_word(self):
        assert score_text("cat", "cat food")[0] > score_text("cat", "bobcatfood")[0]

    def test_shorter_line_wins_tie(self):
        short = "cat"
        long = "cat " + "x" * 200
        assert score_text("cat", short)[0] > score_text("cat", long)[0]

    def test_earlier_match_wins(self):
        assert score_text("cat", "cat is here")[0] > score_text("cat", "here is cat")[0]

    def test_empty_query(self):
        assert score_text("", "anything") is None


class TestFuzzyMatcher:
    @pytest.fixture
    def matcher(self, corpus):
        return FuzzyMatcher(corpus)

    def test_empty_query_yields_nothing(self, matcher):
        assert matcher.search("") == []

    def test_case_insensitive(self, matcher):
        results = matcher.search("PARIS")
        assert [(m.path, m.line) for m in results] == [("README.md", 3)]

    def test_final_sigma_matches_sigma(self):
        matcher = FuzzyMatcher(CorpusIndex.from_pairs([("g.md", "ΟΔΟΣ")]))
        assert [m.positions for m in matcher.search("σ")] == [(3,)]
        assert len(matcher.search("οδος")) == 1
        assert len(matcher.search("ς")) == 1

    @pytest.mark.parametrize("query", ["cat", "cn", "line 1", "fin", "big", "zzz", "e o"])
    def test_inclusion_matches_subsequence_rule(self, corpus, matcher, query):
        found = {(m.path, m.line) for m in matcher.search(query)}
        expected = {
            (line.path, line.number)
            for line in corpus.lines
            if _is_subsequence(query, line.text)
        }
        assert found == expected

    def test_deterministic(self, corpus):
        first = FuzzyMatcher(corpus).search("line")
        second = FuzzyMatcher(corpus).search("line")
        assert first == second

    def test_sorted_by_score_then_line_then_path(self, matcher):
        results = matcher.search("line")
        keys = [(-m.score, m.line, m.path) for m in results]
        assert keys == sorted(keys)

    def test_ties_broken_by_line_then_path(self):
        corpus = CorpusIndex.from_pairs(
            [("b.md", "alpha\nalpha"), ("a.md", "alpha\nalpha")]
        )
        results = FuzzyMatcher(corpus).search("alpha")
        assert [(m.path, m.line) for m in results] == [
            ("a.md", 1),
            ("b.md", 1),
            ("a.md", 2),
            ("b.md", 2),
        ]

    def test_contiguous_line_ranks_first(self, matcher):
        results = matcher.search("cat")
        assert (results[0].path, results[0].line) == ("docs/cats.md", 1)

    def test_extending_query_narrows_consistently(self, corpus, matcher):
        matcher.search("li")
        narrowed = matcher.search("line 4")
        assert narrowed == FuzzyMatcher(corpus).search("line 4")

    def test_shortening_query_rescans_everything(self, corpus, matcher):
        matcher.search("line 42")
        widened = matcher.search("line 4")
        assert widened == FuzzyMatcher(corpus).search("line 4")

    def test_blank_lines_are_not_candidates(self, matcher):
        assert all(m.text.strip() for m in matcher.search(" "))


class TestRank:
    def test_empty_query_keeps_everything_in_order(self):
        items = ["b", "a", "c"]
        assert [r.item for r in rank("", items, key=str)] == items

    def test_filters_and_orders(self):
        items = ["docs/big.md:12", "README.md:3", "docs/other.md:1"]
        ranked = rank("big", items, key=str)
        assert [r.item for r in ranked] == ["docs/big.md:12"]
        assert ranked[0].positions == (5, 6, 7)

    def test_equal_scores_keep_input_order(self):
        items = ["a.md:1", "a.md:1"]
        ranked = rank("a", items, key=str)
        assert [r.item for r in ranked] == items
