"""
Tests for related-article lookup.
"""
from newshub.core.article import Article
from newshub.core.related import CANDIDATE_LIMIT, MAX_RESULTS, build_pattern, find_related
from newshub.core.store import StoreError

SOURCE = "https://example.com/source"


class RecordingStore:
    """Store fake returning canned candidates and recording queries."""
    def __init__(self, candidates=None, error=None):
        self.candidates = candidates or []
        self.error = error
        self.queries = []

    def find(self, pattern, exclude_url, limit):
        self.queries.append((pattern, exclude_url, limit))
        if self.error:
            raise self.error
        return self.candidates[:limit]


def test_build_pattern_escapes_keywords():
    assert build_pattern(["quantum", "c++17"]) == r"quantum|c\+\+17"


def test_empty_keywords_skip_the_store():
    store = RecordingStore([Article(url="https://example.com/other", title="Anything")])
    assert find_related(SOURCE, "The Big One Is Up", "", store) == []
    assert find_related(SOURCE, "", "", store) == []
    assert store.queries == []


def test_query_uses_keyword_alternation():
    store = RecordingStore()
    find_related(SOURCE, "Quantum computing research", "", store)
    assert store.queries == [("quantum|computing|research", SOURCE, CANDIDATE_LIMIT)]


def test_results_capped_at_three():
    candidates = [Article(url=f"https://example.com/{i}", title=f"Quantum story {i}") for i in range(6)]
    store = RecordingStore(candidates)
    results = find_related(SOURCE, "Quantum breakthrough", "", store)
    assert len(results) == MAX_RESULTS == 3
    assert [article.url for article in results] == [
        "https://example.com/0", "https://example.com/1", "https://example.com/2"
    ]


def test_source_article_never_returned():
    candidates = [
        Article(url=SOURCE, title="Quantum breakthrough"),
        Article(url="https://example.com/1", title="Quantum again"),
    ]
    results = find_related(SOURCE, "Quantum breakthrough", "", RecordingStore(candidates))
    assert [article.url for article in results] == ["https://example.com/1"]


def test_store_failure_degrades_to_empty():
    store = RecordingStore(error=StoreError("database is locked"))
    assert find_related(SOURCE, "Quantum breakthrough", "", store) == []


def test_custom_limits():
    candidates = [Article(url=f"https://example.com/{i}", title="Budget news") for i in range(10)]
    store = RecordingStore(candidates)
    results = find_related(SOURCE, "Budget talks", "", store, candidate_limit=8, max_results=5)
    assert len(results) == 5
    assert store.queries[0][2] == 8


class TestWithArticleStore:

    def test_finds_related_articles(self, store, make_article):
        store.upsert(make_article(SOURCE, "Quantum computing milestone", "Researchers report progress"))
        store.upsert(make_article("https://example.com/1", "New quantum processor unveiled"))
        store.upsert(make_article("https://example.com/2", "Local football results", "Weekend scores"))
        store.upsert(make_article("https://example.com/3", "Cloud prices", "Computing costs fall"))

        results = find_related(SOURCE, "Quantum computing milestone", "Researchers report progress", store)
        assert [article.url for article in results] == ["https://example.com/1", "https://example.com/3"]

    def test_more_than_six_matches(self, store, make_article):
        for i in range(10):
            store.upsert(make_article(f"https://example.com/{i}", f"Election night live {i}"))
        results = find_related(SOURCE, "Election results", "", store)
        assert len(results) == 3

    def test_keyword_matches_inside_longer_words(self, store, make_article):
        store.upsert(make_article("https://example.com/1", "Marshall plan anniversary"))
        results = find_related(SOURCE, "Mars rover lands", "", store)
        assert [article.url for article in results] == ["https://example.com/1"]
