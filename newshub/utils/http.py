"""
HTTP utilities for NewsHub.
"""
import asyncio
import time
import logging
from collections import defaultdict
from typing import Optional
from urllib.parse import urlparse

import aiohttp
import async_timeout
import backoff

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 8  # seconds
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

FETCH_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError)
# Malformed URLs: bad IPv6 brackets, hostnames the idna codec rejects (UnicodeError)
URL_ERRORS = (ValueError,)

class RateLimiter:
    """
    Per-domain request spacing with adaptive backoff for failing domains.
    
    Only delays requests, never repeats them. State is kept per domain;
    once more than ``max_domains`` are tracked, domains that are idle and
    past any backoff are forgotten.
    """
    def __init__(self, rate_limit: float = 0.0, max_backoff: float = 60.0, max_domains: int = 1024):
        """
        Args:
            rate_limit: Minimum seconds between two requests to one domain
            max_backoff: Upper bound on the spacing for a failing domain
            max_domains: Tracked domains before idle ones are pruned
        """
        self.rate_limit = rate_limit
        self.max_backoff = max_backoff
        self.max_domains = max_domains
        self.last_requests = defaultdict(lambda: 0.0)
        self.locks = defaultdict(asyncio.Lock)
        self.failure_counts = defaultdict(int)
        self.backoff_times = defaultdict(lambda: rate_limit)
        self.failure_threshold = 3  # Number of failures before increasing backoff

    async def acquire(self, domain: str):
        """
        Wait until a request to ``domain`` is allowed.
        
        Args:
            domain: The domain to rate limit
        """
        if len(self.last_requests) >= self.max_domains:
            self.prune()

        async with self.locks[domain]:
            time_passed = time.monotonic() - self.last_requests[domain]
            wait_time = max(self.rate_limit, self.backoff_times[domain]) - time_passed
            
            if wait_time > 0:
                logger.debug(f"Rate limiting {domain}, waiting {wait_time:.2f}s")
                await asyncio.sleep(wait_time)
                
            self.last_requests[domain] = time.monotonic()

    def prune(self):
        """
        Drop state for domains that are not in use and whose spacing has elapsed.
        """
        now = time.monotonic()
        tracked = set(self.last_requests) | set(self.failure_counts) | set(self.backoff_times)
        stale = [
            domain for domain in tracked
            if now - self.last_requests.get(domain, 0.0) >= max(self.rate_limit, self.backoff_times.get(domain, 0.0))
            and not (domain in self.locks and self.locks[domain].locked())
        ]
        for domain in stale:
            for state in (self.last_requests, self.locks, self.failure_counts, self.backoff_times):
                state.pop(domain, None)
        if stale:
            logger.debug(f"Pruned rate limit state for {len(stale)} domains")

    def report_success(self, domain: str):
        """
        Report a successful request, gradually lowering the domain's backoff.
        
        Args:
            domain: The domain that had a successful request
        """
        self.failure_counts[domain] = 0
        if self.backoff_times[domain] > self.rate_limit:
            self.backoff_times[domain] = max(self.rate_limit, self.backoff_times[domain] * 0.8)

    def report_failure(self, domain: str):
        """
        Report a failed request, raising the domain's backoff after repeated failures.
        
        Args:
            domain: The domain that had a failed request
        """
        self.failure_counts[domain] += 1
        
        if self.failure_counts[domain] >= self.failure_threshold:
            self.backoff_times[domain] = min(
                self.max_backoff, max(1.0, self.backoff_times[domain] * 2.0)
            )
            logger.warning(
                f"Increased backoff for {domain} to {self.backoff_times[domain]:.2f}s "
                f"after {self.failure_counts[domain]} failures"
            )


def _is_client_error(e: Exception) -> bool:
    """4xx responses will not change on a second attempt."""
    return isinstance(e, aiohttp.ClientResponseError) and 400 <= e.status < 500


class HttpFetcher:
    """
    Fetches raw HTML with a browser User-Agent and a bounded timeout.
    """
    def __init__(
        self,
        timeout: float = REQUEST_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        max_tries: int = 1,
        rate_limiter: Optional[RateLimiter] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Args:
            timeout: Seconds allowed for the whole request
            user_agent: User-Agent header sent with every request
            max_tries: Attempts per fetch; 1 disables retries
            rate_limiter: Per-domain limiter, a permissive one by default
            session: Existing aiohttp session to use instead of creating one
        """
        self.timeout = timeout
        self.rate_limiter = rate_limiter or RateLimiter()
        self._session = session
        self._owns_session = session is None
        self.headers = {
            'User-Agent': user_agent,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
            'Accept-Language': 'en-US,en;q=0.5',
            'Accept-Encoding': 'gzip, deflate',
            'DNT': '1',
        }
        self._get = backoff.on_exception(
            backoff.expo,
            FETCH_ERRORS,
            max_tries=max(1, max_tries),
            giveup=_is_client_error,
            logger=logger,
        )(self._get_once)

    @property
    def session(self) -> aiohttp.ClientSession:
        """
        Lazy initialization of aiohttp session.
        
        Returns:
            aiohttp.ClientSession: The HTTP session
        """
        if self._session is None:
            self._session = aiohttp.ClientSession(headers=self.headers)
        return self._session

    async def close(self):
        """Close the aiohttp session if this fetcher created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    async def _get_once(self, url: str) -> str:
        async with async_timeout.timeout(self.timeout):
            async with self.session.get(url, headers=self.headers) as response:
                response.raise_for_status()
                return await response.text(errors='replace')

    async def fetch(self, url: str) -> Optional[str]:
        """
        Fetch a page body.
        
        Args:
            url: The URL to fetch
            
        Returns:
            The response body as text, or None on timeout, network error
            or a non-2xx status
        """
        try:
            domain = urlparse(url).netloc
        except URL_ERRORS as e:
            logger.warning(f"Refusing to fetch {url!r}: {e}")
            return None
        if not domain:
            logger.warning(f"Refusing to fetch {url!r}: not an absolute URL")
            return None

        await self.rate_limiter.acquire(domain)
        
        try:
            content = await self._get(url)
        except FETCH_ERRORS + URL_ERRORS as e:
            self.rate_limiter.report_failure(domain)
            logger.warning(f"Error fetching {url}: {e!r}")
            return None

        self.rate_limiter.report_success(domain)
        return content
