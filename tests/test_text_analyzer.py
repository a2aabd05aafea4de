"""Tests for the local quick-analysis heuristics (emotional power + length)."""

import pytest

import core.text_analyzer as ta
from core.models import EmotionalLevel
from core.text_analyzer import (
    analyze,
    char_count,
    count_words,
    length_label,
    lookup_form,
    score,
    tokenize,
)


class TestTokenize:

    def test_lowercases_and_splits_on_whitespace_runs(self):
        assert tokenize("I  LOVE\tthis!\n") == ["i", "love", "this!"]

    @pytest.mark.parametrize("text", ["", "   ", "\n\t  \r\n"])
    def test_blank_input_has_no_tokens(self, text):
        assert tokenize(text) == []

    def test_lookup_form_strips_punctuation_from_ends_only(self):
        assert lookup_form('"amazing!!"') == "amazing"
        assert lookup_form("(good),") == "good"
        assert lookup_form("don't") == "don't"


class TestEmotionalScore:

    @pytest.mark.parametrize("text", ["", "    ", "\n\n"])
    def test_zero_tokens_is_low(self, text):
        result = score(text)
        assert result.level == EmotionalLevel.LOW
        assert result.token_count == 0
        assert result.normalized_score == 0

    def test_no_matches_no_exclamation_scores_zero(self):
        result = score("the meeting is at noon on the third floor")
        assert result.raw_score == 0
        assert result.normalized_score == 0
        assert result.level == EmotionalLevel.LOW

    def test_scenario_love_this(self):
        result = score("I love this!")
        assert result.token_count == 3
        assert result.raw_score == pytest.approx(3.5)
        assert result.normalized_score == pytest.approx(116.67, abs=0.01)
        assert result.level == EmotionalLevel.HIGH

    def test_scenario_not_good(self):
        result = score("This is not good")
        assert result.raw_score == pytest.approx(0.5)
        assert result.normalized_score == pytest.approx(12.5)
        assert result.level == EmotionalLevel.MEDIUM

    def test_scenario_no_match_single_token(self):
        result = score("ok")
        assert result.raw_score == 0
        assert result.token_count == 1
        assert result.level == EmotionalLevel.LOW

    def test_intensifier_increases_contribution(self):
        assert score("very good").raw_score == pytest.approx(1.5)
        assert score("very good").raw_score > score("good").raw_score

    def test_negation_dampens(self):
        assert score("not amazing").raw_score == pytest.approx(1.5)
        assert score("not amazing").raw_score < score("amazing").raw_score

    def test_negation_uses_raw_previous_token(self):
        # "not," is not in the negation set, so "good" keeps its full weight
        assert score("not, good").raw_score == pytest.approx(1.0)

    def test_intensifier_checked_before_negation(self, monkeypatch):
        monkeypatch.setattr(ta, "NEGATIONS", frozenset({"very"}))
        assert score("very good").raw_score == pytest.approx(1.5)

    def test_only_magnitude_counts(self):
        assert score("hate").raw_score == score("love").raw_score == 3

    def test_uppercase_and_punctuation_match_lexicon(self):
        assert score("AMAZING.").raw_score == pytest.approx(3)

    @pytest.mark.parametrize("base", ["what a great day", "hello", "", "not bad!"])
    def test_each_exclamation_adds_half(self, base):
        assert score(base + "!").raw_score - score(base).raw_score == pytest.approx(0.5)

    @pytest.mark.parametrize("weaker,stronger", [("nice", "great"), ("great", "amazing"), ("ok", "sad")])
    def test_higher_weight_never_decreases_score(self, weaker, stronger):
        template = "this launch is {} for everyone"
        assert score(template.format(stronger)).raw_score >= score(template.format(weaker)).raw_score

    def test_exactly_twenty_is_medium(self):
        result = score("good a b c d")
        assert result.normalized_score == 20
        assert result.level == EmotionalLevel.MEDIUM

    def test_exactly_eight_is_low(self):
        result = score("great " + " ".join(["x"] * 24))
        assert result.normalized_score == 8
        assert result.level == EmotionalLevel.LOW

    def test_just_above_twenty_is_high(self):
        assert score("good a b c").level == EmotionalLevel.HIGH

    @pytest.mark.parametrize("text", ["café 😍 ¡increíble!", "日本語のテキスト", "\x00\x01", "!!!"])
    def test_never_raises(self, text):
        assert score(text).level in EmotionalLevel


class TestCounters:

    def test_count_words(self):
        assert count_words("") == 0
        assert count_words("  a  b ") == 2
        assert count_words("\n\t") == 0

    @pytest.mark.parametrize("words,expected", [
        (0, (25, "Too short")),
        (9, (25, "Too short")),
        (10, (60, "Good")),
        (29, (60, "Good")),
        (30, (90, "Great!")),
        (500, (90, "Great!")),
    ])
    def test_length_label(self, words, expected):
        assert length_label(words) == expected

    def test_char_count_is_raw_length(self):
        assert char_count("  hi  ") == 6
        assert char_count("héllo") == 5


class TestAnalyze:

    def test_combines_both_heuristics(self):
        result = analyze("I love this!")
        assert result.word_count == 3
        assert result.char_count == 12
        assert result.emotional_level == EmotionalLevel.HIGH
        assert (result.length_score, result.length_label) == (25, "Too short")

    def test_length_label_independent_of_emotion(self):
        text = " ".join(["plain"] * 30)
        result = analyze(text)
        assert result.emotional_level == EmotionalLevel.LOW
        assert result.length_label == "Great!"

    def test_to_dict_is_json_friendly(self):
        data = analyze("This is not good").to_dict()
        assert data["emotional_level"] == "Medium"
        assert data["normalized_emotional_score"] == pytest.approx(12.5)
