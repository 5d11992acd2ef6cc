"""
Keyword extraction utilities for NewsHub.
"""
import re
from typing import List

MAX_KEYWORDS = 15
# Keyword length bounds are exclusive: 4 to 24 characters survive
MIN_TOKEN_LENGTH = 3
MAX_TOKEN_LENGTH = 25

# Whitespace plus hyphen, underscore, period, comma and sentence punctuation
_SEPARATORS = re.compile(r"[\s\-_.,!?;:\"()\[\]]+")

STOP_WORDS = frozenset({
    'that', 'this', 'with', 'from', 'they', 'will', 'would', 'there', 'their',
    'what', 'about', 'which', 'when', 'make', 'like', 'just', 'know', 'take',
    'into', 'your', 'some', 'could', 'them', 'than', 'then', 'only', 'come',
    'over', 'also', 'after', 'more', 'most', 'been', 'were', 'said', 'says',
    'does', 'very', 'here', 'where', 'while', 'being', 'because', 'should',
    'these', 'those', 'other', 'such', 'each', 'many', 'much', 'before',
    'between', 'under', 'again', 'against', 'during', 'through', 'until',
    'upon', 'have', 'having', 'onto', 'even', 'still', 'ever', 'within',
})


def tokenize(text: str) -> List[str]:
    """
    Lowercase ``text`` and split it on whitespace and punctuation.
    
    Args:
        text: Text to split
        
    Returns:
        Non-empty tokens in order of appearance
    """
    return [token for token in _SEPARATORS.split(text.lower()) if token]


def extract_keywords(title: str, description: str = "", max_keywords: int = MAX_KEYWORDS) -> List[str]:
    """
    Extract the keyword set of an article from its title and description.

    Tokens are kept when they are 4 to 24 characters long and not stop
    words. The result is deduplicated in first-occurrence order and capped
    at ``max_keywords``.
    
    Args:
        title: Article title
        description: Article description, may be empty
        max_keywords: Maximum number of keywords to return
        
    Returns:
        Ordered list of lowercase keywords
    """
    text = f"{title or ''} {description or ''}"

    keywords = []
    seen = set()
    for token in tokenize(text):
        if len(keywords) >= max_keywords:
            break
        if not MIN_TOKEN_LENGTH < len(token) < MAX_TOKEN_LENGTH:
            continue
        if token in STOP_WORDS or token in seen:
            continue
        seen.add(token)
        keywords.append(token)

    return keywords
