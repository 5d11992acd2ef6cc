"""
Shared fixtures and fakes for the NewsHub tests.
"""
import asyncio
from unittest.mock import Mock

import aiohttp
import pytest

from newshub.core.article import Article
from newshub.core.store import ArticleStore


def paragraph(text: str) -> str:
    return f"<p>{text}</p>"


def page(body: str, head: str = "<title>Example page title for tests</title>") -> str:
    return f"<html><head>{head}</head><body>{body}</body></html>"


class FakeFetcher:
    """Fetch capability returning canned bodies keyed by URL."""
    def __init__(self, pages=None):
        self.pages = pages or {}
        self.calls = []

    async def fetch(self, url):
        self.calls.append(url)
        return self.pages.get(url)


class FakeResponse:
    def __init__(self, body="", status=200, delay=0.0):
        self.body = body
        self.status = status
        self.delay = delay

    def raise_for_status(self):
        if self.status >= 400:
            raise aiohttp.ClientResponseError(
                request_info=Mock(real_url="http://example.com/"),
                history=(),
                status=self.status,
                message="error",
            )

    async def text(self, errors="strict"):
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False


class FakeSession:
    """Stands in for aiohttp.ClientSession; values may be responses or exceptions."""
    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        result = self.responses[url]
        if isinstance(result, BaseException):
            raise result
        return result


@pytest.fixture
def store(tmp_path):
    return ArticleStore(str(tmp_path / "articles.db"))


@pytest.fixture
def make_article():
    def _make(url, title="", description="", **kwargs):
        return Article(url=url, title=title, description=description, **kwargs)
    return _make
