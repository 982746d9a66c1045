"""
Shared fixtures for the dead link crawler tests.

``FakeFetcher`` stands in for ``WebFetcher`` with an in-memory site so the
scanner and crawler can be exercised without network access.
"""

from typing import Dict, List, Optional

import pytest

from deadlinks.crawler.fetcher import FetchResult, ProbeResult
from deadlinks.crawler.parser import LinkExtractor
from deadlinks.crawler.scanner import PageScanner
from deadlinks.crawler.scheduler import SiteCrawler
from deadlinks.crawler.verifier import LinkVerifier


def anchors(*hrefs: str) -> str:
    """Build a minimal HTML page linking to ``hrefs``."""
    body = "\n".join(f'<a href="{href}">{href}</a>' for href in hrefs)
    return f"<html><head><title>t</title></head><body>{body}</body></html>"


class FakeFetcher:
    """
    In-memory fetcher.

    Args:
        pages: URL -> HTML for pages that can be fetched (status 200)
        statuses: URL -> status returned when a link is probed; links that are
            pages default to 200, anything else to 404
        probe_errors: URL -> exception raised when that link is probed
        page_errors: URL -> transport error message when that page is fetched
    """

    def __init__(self, pages: Optional[Dict[str, str]] = None,
                 statuses: Optional[Dict[str, int]] = None,
                 probe_errors: Optional[Dict[str, BaseException]] = None,
                 page_errors: Optional[Dict[str, str]] = None):
        self.pages = pages or {}
        self.statuses = statuses or {}
        self.probe_errors = probe_errors or {}
        self.page_errors = page_errors or {}
        self.fetched: List[str] = []
        self.probed: List[str] = []

    async def fetch(self, url: str) -> FetchResult:
        self.fetched.append(url)
        if url in self.page_errors:
            return FetchResult(url=url, status_code=0, error=self.page_errors[url])
        if url not in self.pages:
            return FetchResult(url=url, status_code=404, reason="Not Found")
        return FetchResult(
            url=url,
            status_code=200,
            content=self.pages[url],
            content_type="text/html",
            encoding="utf-8",
            reason="OK"
        )

    async def probe(self, url: str, timeout: Optional[float] = None) -> ProbeResult:
        self.probed.append(url)
        if url in self.probe_errors:
            raise self.probe_errors[url]
        status = self.statuses.get(url, 200 if url in self.pages else 404)
        reason = {200: "OK", 404: "Not Found", 500: "Internal Server Error"}.get(status)
        return ProbeResult(url=url, status=status, reason=reason, elapsed_ms=1)


def build_crawler(fetcher: FakeFetcher, max_concurrent_pages: int = 1,
                  max_concurrent_links: int = 1) -> SiteCrawler:
    scanner = PageScanner(
        fetcher,
        LinkExtractor(),
        LinkVerifier(fetcher, timeout=1.0),
        max_concurrent_links=max_concurrent_links
    )
    return SiteCrawler(scanner, max_concurrent_pages=max_concurrent_pages)


@pytest.fixture
def extractor() -> LinkExtractor:
    return LinkExtractor()
