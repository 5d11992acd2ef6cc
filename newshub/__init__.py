"""
NewsHub - article content extraction and related-article discovery.

Turns an arbitrary news article URL into clean, paragraph-structured text and
finds other stored articles that share keywords with a given article.
"""

__version__ = "0.1.0"
