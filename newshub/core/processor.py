"""
Article content and related-article processing for NewsHub.
"""
import asyncio
import logging
from typing import Dict, List, Optional, Tuple

from tqdm import tqdm

from newshub.core.article import Article
from newshub.core.extractor import ContentExtractor, MIN_CONTENT_LENGTH
from newshub.core.related import find_related
from newshub.core.store import StoreError

logger = logging.getLogger(__name__)

class ArticleService:
    """
    Serves stored articles, filling in full content on first access.

    An article whose ``full_content`` is missing or shorter than
    ``min_content_length`` is re-extracted each time it is requested until
    an extraction succeeds. A failed extraction leaves stored content as it
    was. Concurrent requests for the same URL share one extraction.
    """
    def __init__(
        self,
        store,
        extractor: ContentExtractor,
        min_content_length: int = MIN_CONTENT_LENGTH,
        related_options: Optional[Dict] = None,
    ):
        """
        Args:
            store: Article store (``find_one``, ``find``, ``update_one``)
            extractor: Content extractor with a fetcher attached
            min_content_length: Stored content shorter than this is re-extracted
            related_options: Keyword arguments passed through to ``find_related``
        """
        self.store = store
        self.extractor = extractor
        self.min_content_length = min_content_length
        self.related_options = related_options or {}
        self._inflight: Dict[str, asyncio.Task] = {}

    async def get_article(self, url: str) -> Optional[Article]:
        """
        Load an article, extracting its full content if needed.
        
        Args:
            url: The article URL
            
        Returns:
            The Article, or None if it is not stored

        Raises:
            StoreError: If the article cannot be read
        """
        article = self.store.find_one(url)
        if article is None:
            return None

        if not article.has_content(self.min_content_length):
            logger.info(f"Extracting full content for: {url}")
            content = await self.fill_content(url)
            if content:
                article.full_content = content

        return article

    async def fill_content(self, url: str) -> Optional[str]:
        """
        Extract and persist content for ``url``, joining an extraction that
        is already running for the same URL.
        
        Args:
            url: The article URL
            
        Returns:
            The extracted content, or None if extraction failed
        """
        task = self._inflight.get(url)
        if task is None:
            task = asyncio.ensure_future(self._extract_and_save(url))
            self._inflight[url] = task
            task.add_done_callback(lambda _: self._inflight.pop(url, None))
        else:
            logger.debug(f"Joining in-flight extraction for {url}")

        # A cancelled caller must not cancel the extraction other callers await
        return await asyncio.shield(task)

    async def _extract_and_save(self, url: str) -> Optional[str]:
        content = await self.extractor.extract(url)
        if content is None:
            return None

        try:
            self.store.update_one(url, content)
        except StoreError as e:
            logger.warning(f"Could not save extracted content for {url}: {e}")

        return content

    def related(
        self,
        url: str,
        title: Optional[str] = None,
        description: Optional[str] = None,
    ) -> List[Article]:
        """
        Find articles related to ``url``.

        When no title is given the stored article's title and description
        are used.
        
        Args:
            url: URL of the source article
            title: Title of the source article
            description: Description of the source article
            
        Returns:
            Related articles, possibly empty
        """
        if title is None:
            try:
                article = self.store.find_one(url)
            except StoreError as e:
                logger.error(f"Could not load {url} for related lookup: {e}")
                return []
            if article is None:
                return []
            title, description = article.title, article.description

        return find_related(url, title, description or "", self.store, **self.related_options)


class ContentProcessor:
    """
    Back-fills full content for stored articles in parallel.
    """
    def __init__(self, service: ArticleService, max_concurrent: int = 5):
        self.service = service
        self.max_concurrent = max_concurrent
        self.semaphore = asyncio.Semaphore(max_concurrent)

    async def fill_missing(self, show_progress: bool = True) -> Dict[str, bool]:
        """
        Extract content for every stored article that lacks it.
        
        Args:
            show_progress: Display a progress bar
            
        Returns:
            Dict mapping article URLs to whether extraction succeeded
        """
        articles = self.service.store.find_missing_content(self.service.min_content_length)
        logger.info(f"Found {len(articles)} articles without full content")

        async def fill_with_semaphore(url: str) -> Tuple[str, bool]:
            async with self.semaphore:
                try:
                    content = await self.service.fill_content(url)
                except Exception as e:
                    logger.warning(f"Failed to fill content for {url}: {e!r}")
                    return url, False
                return url, content is not None

        tasks = [fill_with_semaphore(article.url) for article in articles]
        results = {}

        for task in tqdm(
            asyncio.as_completed(tasks),
            total=len(tasks),
            desc="Extracting articles",
            disable=not show_progress
        ):
            url, success = await task
            results[url] = success

        succeeded = sum(1 for success in results.values() if success)
        logger.info(f"Extracted content for {succeeded}/{len(results)} articles")
        return results
