"""
HTTP fetcher for pages and lightweight link probes.
"""

import asyncio
import aiohttp
import logging
import time
from typing import Optional, Dict
from dataclasses import dataclass
from aiohttp import ClientSession, ClientTimeout, ClientError


DEFAULT_USER_AGENT = (
    'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36'
)
DEFAULT_ACCEPT = (
    'text/html,application/xhtml+xml,application/xml;q=0.9,'
    'image/avif,image/webp,image/apng,*/*;q=0.8'
)
DEFAULT_ACCEPT_LANGUAGE = 'en-US,en;q=0.9'


@dataclass
class FetchResult:
    """Result of a page fetch."""
    url: str
    status_code: int
    content: Optional[str] = None
    headers: Optional[Dict[str, str]] = None
    error: Optional[str] = None
    fetch_time: float = 0.0
    content_type: Optional[str] = None
    encoding: Optional[str] = None
    reason: Optional[str] = None


@dataclass
class ProbeResult:
    """Status and metadata of a link probe. The body is never read."""
    url: str
    status: int
    reason: Optional[str] = None
    headers: Optional[Dict[str, str]] = None
    elapsed_ms: int = 0


class WebFetcher:
    """
    Fetches pages and probes links over a shared aiohttp session.

    Pages go through ``fetch``, which reports transport failures in the
    returned ``FetchResult``. Links go through ``probe``, which never fails on
    an HTTP error status but lets transport exceptions propagate so callers
    can classify them.
    """

    def __init__(self, user_agent: str = DEFAULT_USER_AGENT, request_timeout: float = 30,
                 max_concurrent_requests: int = 10, accept: str = DEFAULT_ACCEPT,
                 accept_language: str = DEFAULT_ACCEPT_LANGUAGE,
                 max_content_size: int = 10 * 1024 * 1024):
        self.user_agent = user_agent
        self.request_timeout = request_timeout
        self.max_concurrent_requests = max_concurrent_requests
        self.accept = accept
        self.accept_language = accept_language
        self.max_content_size = max_content_size

        self.logger = logging.getLogger(__name__)

        # Session management
        self.session: Optional[ClientSession] = None
        self.semaphore = asyncio.Semaphore(max_concurrent_requests)

        # Statistics
        self.stats = {
            'total_requests': 0,
            'successful_requests': 0,
            'failed_requests': 0,
            'total_probes': 0,
            'total_bytes_downloaded': 0
        }

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    @property
    def headers(self) -> Dict[str, str]:
        return {
            'User-Agent': self.user_agent,
            'Accept': self.accept,
            'Accept-Language': self.accept_language,
        }

    async def start(self):
        """Initialize the fetcher session."""
        if self.session is None:
            timeout = ClientTimeout(total=self.request_timeout)

            self.session = aiohttp.ClientSession(
                timeout=timeout,
                headers=self.headers,
                connector=aiohttp.TCPConnector(
                    limit=self.max_concurrent_requests * 2,
                    limit_per_host=10,
                    ttl_dns_cache=300,
                    use_dns_cache=True
                )
            )
            self.logger.debug("WebFetcher session started")

    async def close(self):
        """Close the fetcher session."""
        if self.session:
            await self.session.close()
            self.session = None
            self.logger.debug("WebFetcher session closed")

    def _require_session(self) -> ClientSession:
        if self.session is None:
            raise RuntimeError("WebFetcher is not started; use 'async with WebFetcher(...)'")
        return self.session

    async def fetch(self, url: str) -> FetchResult:
        """
        Fetch a single page.

        Args:
            url: The URL to fetch

        Returns:
            FetchResult object containing the response data or error information
        """
        session = self._require_session()
        start_time = time.time()

        async with self.semaphore:
            try:
                self.stats['total_requests'] += 1

                async with session.get(url) as response:
                    fetch_time = time.time() - start_time

                    headers = dict(response.headers)
                    content_type = response.headers.get('content-type', '').lower()

                    # Only download text content
                    if not self._is_text_content(content_type):
                        self.logger.debug(f"Skipping non-text content: {url} ({content_type})")
                        return FetchResult(
                            url=url,
                            status_code=response.status,
                            headers=headers,
                            content_type=content_type,
                            reason=response.reason,
                            fetch_time=fetch_time
                        )

                    content = await self._read_content_safely(response)

                    if content:
                        self.stats['total_bytes_downloaded'] += len(content)
                    self.stats['successful_requests'] += 1

                    result = FetchResult(
                        url=url,
                        status_code=response.status,
                        content=content,
                        headers=headers,
                        content_type=content_type,
                        encoding=response.charset,
                        reason=response.reason,
                        fetch_time=fetch_time
                    )

                    self.logger.debug(f"Fetched {url}: {response.status} ({len(content) if content else 0} bytes)")
                    return result

            except asyncio.TimeoutError:
                self.stats['failed_requests'] += 1
                error_msg = "Request timeout"
                self.logger.warning(f"Timeout fetching {url}")

            except ClientError as e:
                self.stats['failed_requests'] += 1
                error_msg = f"Client error: {str(e)}"
                self.logger.warning(f"Client error fetching {url}: {e}")

            except Exception as e:
                self.stats['failed_requests'] += 1
                error_msg = f"Unexpected error: {str(e)}"
                self.logger.error(f"Unexpected error fetching {url}: {e}")

            return FetchResult(
                url=url,
                status_code=0,
                error=error_msg,
                fetch_time=time.time() - start_time
            )

    async def probe(self, url: str, timeout: Optional[float] = None) -> ProbeResult:
        """
        Request a link and report its final status without reading the body.

        Redirects are followed, so the status is that of the final response.
        HTTP error statuses are returned, not raised. Transport errors
        (timeouts, DNS, TLS, refused connections) propagate unchanged.
        """
        session = self._require_session()
        kwargs = {}
        if timeout is not None:
            kwargs['timeout'] = ClientTimeout(total=timeout)

        async with self.semaphore:
            self.stats['total_probes'] += 1
            start = time.monotonic()
            async with session.get(url, allow_redirects=True, **kwargs) as response:
                elapsed_ms = int((time.monotonic() - start) * 1000)
                return ProbeResult(
                    url=url,
                    status=response.status,
                    reason=response.reason,
                    headers=dict(response.headers),
                    elapsed_ms=elapsed_ms
                )

    def _is_text_content(self, content_type: str) -> bool:
        """Check if content type is text-based."""
        if not content_type:
            return True

        text_types = [
            'text/html',
            'text/plain',
            'text/xml',
            'application/xml',
            'application/xhtml+xml',
        ]

        return any(text_type in content_type for text_type in text_types)

    async def _read_content_safely(self, response) -> Optional[str]:
        """
        Read response content, giving up past ``max_content_size`` bytes.

        Returns:
            Content string or None if too large
        """
        max_size = self.max_content_size
        content_length = response.headers.get('content-length')
        if content_length and content_length.isdigit() and int(content_length) > max_size:
            self.logger.warning(f"Content too large ({content_length} bytes): {response.url}")
            return None

        # Read content in chunks to respect size limit
        content_bytes = b''
        async for chunk in response.content.iter_chunked(8192):
            content_bytes += chunk
            if len(content_bytes) > max_size:
                self.logger.warning(f"Content exceeded size limit during reading: {response.url}")
                return None

        encoding = response.charset or 'utf-8'
        try:
            return content_bytes.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            # Try common encodings
            for fallback_encoding in ['utf-8', 'cp1252']:
                try:
                    return content_bytes.decode(fallback_encoding)
                except UnicodeDecodeError:
                    continue

            return content_bytes.decode('utf-8', errors='ignore')

    def get_stats(self) -> Dict[str, int]:
        """Get fetcher statistics."""
        return self.stats.copy()
