"""
Article body extraction for NewsHub.
"""
import re
import logging
from html import escape
from typing import List, Optional, Sequence

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

# Article-body containers, most specific conventions first
DEFAULT_SELECTORS = (
    'article',
    '[role="main"]',
    '[role="article"]',
    '.article-body',
    '.article-content',
    '.post-content',
    '.entry-content',
    '.story-body',
    'main',
    '.content',
)

MIN_PARAGRAPH_LENGTH = 20
MIN_PARAGRAPH_COUNT = 3
MIN_SENTENCE_LENGTH = 50
MAX_PARAGRAPH_LENGTH = 1000
MAX_PARAGRAPHS = 25
MIN_CONTENT_LENGTH = 100

INVISIBLE_TAGS = ['script', 'style', 'noscript', 'template', 'head', 'svg', 'iframe']

_WHITESPACE = re.compile(r'\s+')
_SENTENCE_BOUNDARY = re.compile(r'(?<=[.!?])\s+')


def normalize_whitespace(text: str) -> str:
    """Collapse whitespace runs to single spaces and trim."""
    return _WHITESPACE.sub(' ', text).strip()


def split_sentences(text: str) -> List[str]:
    """Split text after '.', '!' or '?' followed by whitespace."""
    return [sentence for sentence in _SENTENCE_BOUNDARY.split(text) if sentence]


class ContentExtractor:
    """
    Derives clean paragraph text from an article page.

    Containers from ``selectors`` are tried in order and the first one with
    at least ``min_paragraph_count`` usable paragraphs wins. Without such a
    container every paragraph in the document is used, and without any
    paragraphs the visible text is split into sentences. The result is a
    string of ``<p>`` elements, or None when it is too short to be useful.
    """
    def __init__(
        self,
        fetcher=None,
        selectors: Sequence[str] = DEFAULT_SELECTORS,
        min_paragraph_length: int = MIN_PARAGRAPH_LENGTH,
        min_paragraph_count: int = MIN_PARAGRAPH_COUNT,
        min_sentence_length: int = MIN_SENTENCE_LENGTH,
        max_paragraph_length: int = MAX_PARAGRAPH_LENGTH,
        max_paragraphs: int = MAX_PARAGRAPHS,
        min_content_length: int = MIN_CONTENT_LENGTH,
    ):
        """
        Args:
            fetcher: Object with an ``async fetch(url) -> Optional[str]`` method.
                Only needed by ``extract``.
            selectors: CSS selectors of candidate body containers, in priority order
            min_paragraph_length: Paragraphs must be longer than this
            min_paragraph_count: Paragraphs a container needs to be accepted
            min_sentence_length: Fallback sentences must be longer than this
            max_paragraph_length: Paragraphs are truncated to this length
            max_paragraphs: Maximum paragraphs in the output
            min_content_length: Output of this length or shorter is rejected
        """
        self.fetcher = fetcher
        self.selectors = list(selectors)
        self.min_paragraph_length = min_paragraph_length
        self.min_paragraph_count = min_paragraph_count
        self.min_sentence_length = min_sentence_length
        self.max_paragraph_length = max_paragraph_length
        self.max_paragraphs = max_paragraphs
        self.min_content_length = min_content_length

    async def extract(self, url: str) -> Optional[str]:
        """
        Fetch ``url`` and extract its article body.
        
        Args:
            url: The article URL
            
        Returns:
            Paragraph-marked content, or None if fetching or extraction failed
        """
        if self.fetcher is None:
            raise RuntimeError("ContentExtractor.extract needs a fetcher")

        try:
            html = await self.fetcher.fetch(url)
        except Exception as e:
            # Any HTTP client may sit behind the fetcher; its errors are fetch failures
            logger.warning(f"Error fetching {url}: {e!r}")
            return None
        if not html:
            return None

        try:
            content = self.extract_from_html(html)
        except Exception as e:
            logger.warning(f"Error extracting content from {url}: {e}")
            return None

        if content is None:
            logger.info(f"No usable content extracted from {url}")
        return content

    def extract_from_html(self, html: str) -> Optional[str]:
        """
        Extract the article body from an HTML document.
        
        Args:
            html: Raw HTML
            
        Returns:
            Paragraph-marked content, or None if it does not pass the
            minimum content length
        """
        soup = BeautifulSoup(html, 'html.parser')

        paragraphs = self._from_containers(soup)
        if not paragraphs:
            paragraphs = self._usable_paragraphs(soup.find_all('p'))
            if paragraphs:
                logger.debug(f"Using {len(paragraphs)} document-wide paragraphs")
        if not paragraphs:
            paragraphs = self._from_sentences(soup)
            if paragraphs:
                logger.debug(f"Using {len(paragraphs)} sentences from visible text")

        content = self._render(paragraphs)
        if len(content) <= self.min_content_length:
            return None
        return content

    def _usable_paragraphs(self, elements) -> List[str]:
        texts = (normalize_whitespace(element.get_text(separator=' ')) for element in elements)
        return [text for text in texts if len(text) > self.min_paragraph_length]

    def _from_containers(self, soup: BeautifulSoup) -> List[str]:
        for selector in self.selectors:
            container = soup.select_one(selector)
            if container is None:
                continue

            paragraphs = self._usable_paragraphs(container.find_all('p'))
            if len(paragraphs) >= self.min_paragraph_count:
                logger.debug(f"Selector {selector!r} matched {len(paragraphs)} paragraphs")
                return paragraphs
        return []

    def _from_sentences(self, soup: BeautifulSoup) -> List[str]:
        for element in soup.find_all(INVISIBLE_TAGS):
            # Nested ones are already gone with their ancestor
            if not element.decomposed:
                element.decompose()

        text = normalize_whitespace(soup.get_text(separator=' '))
        return [
            sentence for sentence in split_sentences(text)
            if len(sentence) > self.min_sentence_length
        ]

    def _render(self, paragraphs: List[str]) -> str:
        return ''.join(
            f"<p>{escape(normalize_whitespace(paragraph)[:self.max_paragraph_length], quote=False)}</p>"
            for paragraph in paragraphs[:self.max_paragraphs]
        )
