"""
Command-line interface for NewsHub.
"""
import sys
import json
import argparse
import logging
import asyncio
from typing import List, Optional

from dotenv import load_dotenv

from newshub.config import get_config, load_config
from newshub.core.article import Article
from newshub.core.extractor import ContentExtractor
from newshub.core.processor import ArticleService, ContentProcessor
from newshub.core.store import ArticleStore, StoreError
from newshub.utils.http import HttpFetcher, RateLimiter
from newshub.utils.nlp import extract_keywords

logger = logging.getLogger(__name__)

def setup_logging(level: str = "INFO", log_file: Optional[str] = None):
    """
    Configure root logging for the command-line tool.
    
    Args:
        level: Log level name
        log_file: Optional file to log to in addition to stderr
    """
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )

def parse_args(argv: Optional[List[str]] = None):
    """
    Parse command-line arguments.
    
    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(description="NewsHub - article extraction and related articles")
    parser.add_argument("--config", help="Path to a YAML or JSON config file")
    parser.add_argument("--db", help="Path to the article database (overrides store.path)")
    parser.add_argument("--log-level", default="WARNING", help="Log level (default: WARNING)")
    parser.add_argument("--log-file", help="Also write logs to this file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    extract = subparsers.add_parser("extract", help="Extract the article body of a URL")
    extract.add_argument("url")

    keywords = subparsers.add_parser("keywords", help="Show the keyword set of a title and description")
    keywords.add_argument("title")
    keywords.add_argument("description", nargs="?", default="")

    article = subparsers.add_parser("article", help="Show a stored article, extracting its content if needed")
    article.add_argument("url")

    related = subparsers.add_parser("related", help="Find stored articles related to an article")
    related.add_argument("url")
    related.add_argument("--title", help="Title to match on (default: the stored title)")
    related.add_argument("--description", default=None, help="Description to match on")

    import_cmd = subparsers.add_parser("import", help="Load articles from a JSON file into the store")
    import_cmd.add_argument("file")

    fill = subparsers.add_parser("fill", help="Extract content for every stored article missing it")
    fill.add_argument("--no-progress", action="store_true", help="Hide the progress bar")

    return parser.parse_args(argv)

def build_extractor(fetcher: Optional[HttpFetcher] = None) -> ContentExtractor:
    """Create a ContentExtractor from configuration."""
    return ContentExtractor(
        fetcher=fetcher,
        selectors=get_config("extraction.selectors"),
        min_paragraph_length=get_config("extraction.min_paragraph_length"),
        min_paragraph_count=get_config("extraction.min_paragraph_count"),
        min_sentence_length=get_config("extraction.min_sentence_length"),
        max_paragraph_length=get_config("extraction.max_paragraph_length"),
        max_paragraphs=get_config("extraction.max_paragraphs"),
        min_content_length=get_config("extraction.min_content_length"),
    )

def build_fetcher() -> HttpFetcher:
    """Create an HttpFetcher from configuration."""
    return HttpFetcher(
        timeout=get_config("http.timeout"),
        user_agent=get_config("http.user_agent"),
        max_tries=get_config("http.max_tries"),
        rate_limiter=RateLimiter(
            rate_limit=get_config("http.rate_limit"),
            max_backoff=get_config("http.max_backoff"),
        ),
    )

def build_service(store: ArticleStore, extractor: ContentExtractor) -> ArticleService:
    """Create an ArticleService from configuration."""
    return ArticleService(
        store,
        extractor,
        min_content_length=get_config("extraction.min_content_length"),
        related_options={
            "max_keywords": get_config("related.max_keywords"),
            "candidate_limit": get_config("related.candidate_limit"),
            "max_results": get_config("related.max_results"),
        },
    )

def load_articles(path: str) -> List[Article]:
    """
    Read article records from a JSON file.

    Accepts a list of records or an object with an ``articles`` list, as
    returned by the news API. Records without a URL are skipped.
    
    Args:
        path: Path to the JSON file
        
    Returns:
        List of Article objects
    """
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    records = (data.get('articles') or []) if isinstance(data, dict) else data
    articles = []
    for record in records:
        if not isinstance(record, dict):
            logger.warning(f"Skipping non-object record: {record!r}")
            continue
        try:
            articles.append(Article.from_dict(record))
        except ValueError as e:
            logger.warning(f"Skipping record: {e}")
    return articles

def emit(value):
    """Write a JSON document to stdout."""
    print(json.dumps(value, indent=2, ensure_ascii=False))

async def async_main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the application.
    """
    load_dotenv(override=True)
    args = parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    if args.config:
        load_config(args.config)

    if args.command == "keywords":
        emit(extract_keywords(
            args.title, args.description,
            max_keywords=get_config("related.max_keywords")
        ))
        return 0

    fetcher = build_fetcher()
    extractor = build_extractor(fetcher)

    try:
        if args.command == "extract":
            content = await extractor.extract(args.url)
            if content is None:
                logger.error(f"Could not extract content from {args.url}")
                return 1
            print(content)
            return 0

        store = ArticleStore(args.db or get_config("store.path"))
        service = build_service(store, extractor)

        if args.command == "import":
            articles = load_articles(args.file)
            for article in articles:
                store.upsert(article)
            logger.info(f"Imported {len(articles)} articles into {store.db_path}")
            emit({"imported": len(articles)})
            return 0

        if args.command == "article":
            article = await service.get_article(args.url)
            if article is None:
                logger.error(f"Article not found in database: {args.url}")
                return 1
            emit(article.to_dict())
            return 0

        if args.command == "related":
            articles = service.related(args.url, args.title, args.description)
            emit([article.to_dict() for article in articles])
            return 0

        if args.command == "fill":
            processor = ContentProcessor(service, max_concurrent=get_config("processing.max_concurrent"))
            results = await processor.fill_missing(show_progress=not args.no_progress)
            emit({
                "processed": len(results),
                "extracted": sum(1 for success in results.values() if success),
            })
            return 0
    except StoreError as e:
        logger.error(f"Database error: {e}")
        return 1
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Could not read input: {e}")
        return 1
    finally:
        await fetcher.close()

    return 1

def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point for the command-line script.
    """
    try:
        return asyncio.run(async_main(argv))
    except KeyboardInterrupt:
        logger.info("Process interrupted by user")
        return 1

if __name__ == "__main__":
    sys.exit(main())
