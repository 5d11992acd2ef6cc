"""
Related-article lookup for NewsHub.
"""
import re
import logging
from typing import List, Sequence

from newshub.core.article import Article
from newshub.core.store import StoreError
from newshub.utils.nlp import MAX_KEYWORDS, extract_keywords

logger = logging.getLogger(__name__)

# Rows fetched from the store before the result is cut to MAX_RESULTS
CANDIDATE_LIMIT = 6
MAX_RESULTS = 3


def build_pattern(keywords: Sequence[str]) -> str:
    """
    Join keywords into one alternation pattern (``kw1|kw2|...``).

    The pattern matches keywords anywhere in a field, so "art" also
    matches "article".
    """
    return '|'.join(re.escape(keyword) for keyword in keywords)


def find_related(
    source_url: str,
    title: str,
    description: str,
    store,
    max_keywords: int = MAX_KEYWORDS,
    candidate_limit: int = CANDIDATE_LIMIT,
    max_results: int = MAX_RESULTS,
) -> List[Article]:
    """
    Find stored articles whose title or description shares a keyword
    with the given article.
    
    Args:
        source_url: URL of the article itself, never part of the result
        title: Title of the article
        description: Description of the article, may be empty
        store: Store with ``find(pattern, exclude_url, limit)``
        max_keywords: Maximum keywords to search for
        candidate_limit: Rows requested from the store
        max_results: Maximum articles returned
        
    Returns:
        Up to ``max_results`` articles in store order; empty when there are
        no keywords or the store fails
    """
    keywords = extract_keywords(title or "", description or "", max_keywords=max_keywords)
    if not keywords:
        logger.debug(f"No keywords for {source_url}, skipping related lookup")
        return []

    try:
        candidates = store.find(build_pattern(keywords), source_url, candidate_limit)
    except StoreError as e:
        logger.error(f"Related article lookup failed for {source_url}: {e}")
        return []

    return [article for article in candidates if article.url != source_url][:max_results]
