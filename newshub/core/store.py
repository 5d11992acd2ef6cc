"""
Article storage for NewsHub.
"""
import re
import sqlite3
import logging
from contextlib import contextmanager
from functools import lru_cache
from pathlib import Path
from typing import Iterator, List, Optional

from newshub.core.article import Article

logger = logging.getLogger(__name__)

_COLUMNS = (
    'url', 'title', 'description', 'full_content', 'author',
    'source', 'image_url', 'category', 'published'
)

class StoreError(Exception):
    """Raised when the underlying database fails."""


@lru_cache(maxsize=128)
def _compile(pattern: str):
    return re.compile(pattern, re.IGNORECASE)

def _regexp(pattern: str, value: Optional[str]) -> bool:
    """Backs the SQL ``value REGEXP pattern`` operator (case-insensitive search)."""
    if value is None:
        return False
    return _compile(pattern).search(value) is not None


class ArticleStore:
    """
    SQLite-backed article store keyed by URL.

    Rows keep insertion order, which is the order ``find`` returns matches in.
    """
    def __init__(self, db_path: str = "cache/articles.db"):
        self.db_path = Path(db_path)
        self._init_dir()
        self._init_db()

    def _init_dir(self):
        """Create the parent directory of the database file."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def _init_db(self):
        """Initialize the articles table."""
        with self._connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS articles (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    url TEXT NOT NULL UNIQUE,
                    title TEXT NOT NULL DEFAULT '',
                    description TEXT NOT NULL DEFAULT '',
                    full_content TEXT,
                    author TEXT,
                    source TEXT,
                    image_url TEXT,
                    category TEXT,
                    published TEXT,
                    updated DATETIME DEFAULT CURRENT_TIMESTAMP
                )
            """)

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        """
        Open a connection with the REGEXP function registered.

        Commits on success, rolls back on error, and re-raises any
        ``sqlite3.Error`` as ``StoreError``.
        """
        conn = None
        try:
            conn = sqlite3.connect(str(self.db_path))
            conn.row_factory = sqlite3.Row
            conn.create_function("REGEXP", 2, _regexp, deterministic=True)
            with conn:
                yield conn
        except sqlite3.Error as e:
            raise StoreError(f"Article store failure ({self.db_path}): {e}") from e
        finally:
            if conn is not None:
                conn.close()

    @staticmethod
    def _to_article(row: sqlite3.Row) -> Article:
        return Article(**{column: row[column] for column in _COLUMNS})

    def upsert(self, article: Article):
        """
        Insert an article or refresh its display fields.

        An existing ``full_content`` is kept when the incoming record has none.
        
        Args:
            article: The article to store
        """
        with self._connection() as conn:
            conn.execute(
                """
                INSERT INTO articles (url, title, description, full_content, author,
                                      source, image_url, category, published)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(url) DO UPDATE SET
                    title = excluded.title,
                    description = excluded.description,
                    full_content = COALESCE(excluded.full_content, articles.full_content),
                    author = excluded.author,
                    source = excluded.source,
                    image_url = excluded.image_url,
                    category = excluded.category,
                    published = excluded.published,
                    updated = CURRENT_TIMESTAMP
                """,
                tuple(getattr(article, column) for column in _COLUMNS)
            )

    def find_one(self, url: str) -> Optional[Article]:
        """
        Look up an article by its URL.
        
        Args:
            url: The article URL
            
        Returns:
            The Article, or None if it is not stored
        """
        with self._connection() as conn:
            row = conn.execute(
                "SELECT * FROM articles WHERE url = ?", (url,)
            ).fetchone()
        return self._to_article(row) if row else None

    def find(self, pattern: str, exclude_url: str, limit: int) -> List[Article]:
        """
        Find articles whose title or description matches a regular expression.

        Matching is a case-insensitive search anywhere in the field, not a
        whole-word match.
        
        Args:
            pattern: Regular expression source
            exclude_url: URL of an article to leave out of the results
            limit: Maximum number of rows to return
            
        Returns:
            Matching articles in insertion order
        """
        with self._connection() as conn:
            rows = conn.execute(
                """
                SELECT * FROM articles
                WHERE url != ?
                  AND (title REGEXP ? OR description REGEXP ?)
                ORDER BY id
                LIMIT ?
                """,
                (exclude_url, pattern, pattern, limit)
            ).fetchall()
        return [self._to_article(row) for row in rows]

    def update_one(self, url: str, full_content: str) -> bool:
        """
        Set the full content of a stored article.
        
        Args:
            url: The article URL
            full_content: Extracted content to persist
            
        Returns:
            True if a row was updated
        """
        with self._connection() as conn:
            cursor = conn.execute(
                """
                UPDATE articles
                SET full_content = ?, updated = CURRENT_TIMESTAMP
                WHERE url = ?
                """,
                (full_content, url)
            )
            return cursor.rowcount > 0

    def find_missing_content(self, min_length: int) -> List[Article]:
        """
        List articles whose full content is absent or shorter than ``min_length``.
        """
        with self._connection() as conn:
            rows = conn.execute(
                """
                SELECT * FROM articles
                WHERE full_content IS NULL OR length(full_content) < ?
                ORDER BY id
                """,
                (min_length,)
            ).fetchall()
        return [self._to_article(row) for row in rows]
