"""
Tests for keyword extraction.
"""
from newshub.utils.nlp import MAX_KEYWORDS, STOP_WORDS, extract_keywords, tokenize


class TestTokenize:

    def test_lowercases_and_splits_on_punctuation(self):
        assert tokenize("AI-powered, self_driving cars! Really? Yes.") == [
            "ai", "powered", "self", "driving", "cars", "really", "yes"
        ]

    def test_empty_text(self):
        assert tokenize("") == []
        assert tokenize("  ...  ") == []


class TestExtractKeywords:

    def test_title_only(self):
        keywords = extract_keywords("Breakthrough in Quantum Computing Research", "")
        assert keywords == ["breakthrough", "quantum", "computing", "research"]
        assert "in" not in keywords

    def test_empty_input(self):
        assert extract_keywords("", "") == []

    def test_only_stopwords_and_short_words(self):
        assert extract_keywords("The Big One Is Up", "") == []

    def test_stopwords_removed(self):
        keywords = extract_keywords("What they said about the election", "")
        assert keywords == ["election"]
        assert all(keyword not in STOP_WORDS for keyword in keywords)

    def test_length_bounds(self):
        at_limit = "a" * 24
        too_long = "b" * 25
        keywords = extract_keywords(f"abc abcd {at_limit} {too_long}", "")
        assert keywords == ["abcd", at_limit]

    def test_description_follows_title(self):
        keywords = extract_keywords("Solar panels", "Cheaper solar storage arrives")
        assert keywords == ["solar", "panels", "cheaper", "storage", "arrives"]

    def test_deduplicates_in_first_occurrence_order(self):
        keywords = extract_keywords("Rocket launch delayed", "The rocket LAUNCH window moved")
        assert keywords == ["rocket", "launch", "delayed", "window", "moved"]

    def test_capped_at_fifteen(self):
        words = [f"topic{chr(ord('a') + i)}" for i in range(20)]
        keywords = extract_keywords(" ".join(words), "")
        assert len(keywords) == MAX_KEYWORDS == 15
        assert keywords == words[:15]

    def test_custom_cap(self):
        assert extract_keywords("Markets rally after central bank decision", "", max_keywords=2) == [
            "markets", "rally"
        ]

    def test_deterministic(self):
        args = ("Electric vehicles outsell diesel", "Battery prices keep falling")
        assert extract_keywords(*args) == extract_keywords(*args)

    def test_zero_cap_returns_nothing(self):
        assert extract_keywords("Quantum computing research", "", max_keywords=0) == []
