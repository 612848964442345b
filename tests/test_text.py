"""Tests for tokenizing, relevance scoring and fact extraction."""

import re

from local_supermemory.domain.text import FactExtractor, extract_facts, score, split_sentences, tokenize


class TestTokenize:
    def test_lowercases_and_drops_short_terms(self):
        assert list(tokenize("I am OK with Dark-Mode!")) == ["with", "dark", "mode"]

    def test_keeps_digits_and_underscores(self):
        assert list(tokenize("snake_case v2 2024")) == ["snake_case", "2024"]

    def test_restartable(self):
        text = "green tea morning"
        assert list(tokenize(text)) == list(tokenize(text))

    def test_empty(self):
        assert list(tokenize("")) == []
        assert list(tokenize("a b c !!")) == []


class TestSplitSentences:
    def test_splits_on_runs_of_terminators(self):
        assert split_sentences("One. Two?! Three") == ["One", " Two", " Three"]


class TestScore:
    def test_no_shared_terms_is_zero(self):
        assert score("cat", "cut") == 0.0

    def test_empty_inputs_are_zero(self):
        assert score("", "dark mode") == 0.0
        assert score("dark mode", "") == 0.0
        assert score("a b", "dark mode") == 0.0

    def test_bounded(self):
        assert score("dark mode", "dark mode") == 1.0
        assert 0.0 <= score("dark", "dark dark dark dark") <= 1.0

    def test_exact_substring_boost(self):
        literal = score("dark mode", "I love dark mode")
        scattered = score("dark mode", "dark and also some unrelated mode word salad")
        assert literal > scattered

    def test_case_insensitive_boost(self):
        assert score("Dark Mode", "i love DARK MODE") == score("dark mode", "i love dark mode")

    def test_expected_value(self):
        # 2 matches / sqrt(2 query terms * 5 content terms) + 0.3
        assert abs(score("dark mode", "I love using dark mode at night") - (2 / 10**0.5 + 0.3)) < 1e-9


class TestExtractFacts:
    def test_green_tea(self):
        assert extract_facts("I always drink green tea in the morning") == [
            "I always drink green tea in the morning"
        ]

    def test_one_fact_per_matching_sentence_in_order(self):
        content = "My favorite editor is vim. The sky is blue! Remember to water the plants?"
        assert extract_facts(content) == [
            "My favorite editor is vim",
            "Remember to water the plants",
        ]

    def test_short_sentences_ignored(self):
        assert extract_facts("I like it.") == []

    def test_trigger_may_start_inside_a_word(self):
        # "taxi never" contains "i never"
        assert extract_facts("The taxi never came back today") == ["The taxi never came back today"]

    def test_sentence_without_trigger(self):
        assert extract_facts("The bus came back late today") == []

    def test_case_insensitive(self):
        assert extract_facts("i PREFER tabs over spaces") == ["i PREFER tabs over spaces"]

    def test_custom_patterns(self):
        extractor = FactExtractor(patterns=[re.compile(r"\bdeadline\b", re.IGNORECASE)])
        assert extractor.extract("The deadline is Friday. I prefer Mondays.") == ["The deadline is Friday"]
