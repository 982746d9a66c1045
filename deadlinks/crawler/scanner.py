"""
Single-page scanning: fetch a page, extract its links and verify each one.
"""

import asyncio
import logging
from typing import List

from .errors import PageScanError
from .fetcher import WebFetcher
from .models import BrokenLink, LinkOutcome, PageScanResult, ScanStats
from .parser import LinkExtractor
from .verifier import LinkVerifier


class PageScanner:
    """
    Scans one page at a time.

    A page that cannot be fetched raises PageScanError. Individual links never
    fail the scan; they come back as BrokenLink entries.
    """

    def __init__(self, fetcher: WebFetcher, extractor: LinkExtractor,
                 verifier: LinkVerifier, max_concurrent_links: int = 1):
        if max_concurrent_links < 1:
            raise ValueError("max_concurrent_links must be at least 1")
        self.fetcher = fetcher
        self.extractor = extractor
        self.verifier = verifier
        self.max_concurrent_links = max_concurrent_links
        self.logger = logging.getLogger(__name__)

    async def scan_page(self, page_url: str) -> PageScanResult:
        fetch_result = await self.fetcher.fetch(page_url)

        if fetch_result.error:
            self.logger.info(f"Failed to scan {page_url}: {fetch_result.error}")
            raise PageScanError(page_url, fetch_result.error, fetch_result.status_code)

        if fetch_result.status_code >= 400:
            reason = fetch_result.reason or f"HTTP Error {fetch_result.status_code}"
            self.logger.info(f"Failed to scan {page_url}: {fetch_result.status_code} {reason}")
            raise PageScanError(page_url, reason, fetch_result.status_code)

        self.logger.debug(f"Fetched {page_url} in {fetch_result.fetch_time:.2f}s "
                          f"(encoding: {fetch_result.encoding or 'unknown'})")

        found_links = self.extractor.extract_links(fetch_result.content or '', page_url)
        self.logger.info(f"Found {len(found_links)} links on {page_url}")

        outcomes = await self._verify_all(list(found_links), page_url)
        broken_links: List[BrokenLink] = [o for o in outcomes if o.is_broken]
        stats = ScanStats.from_links(outcomes)

        self.logger.info(f"Scan result for {page_url}: {stats.total_links_scanned} links, "
                         f"{stats.working_links} working, {stats.broken_links} broken")

        return PageScanResult(
            page_url=page_url,
            broken_links=broken_links,
            found_links=found_links,
            stats=stats
        )

    async def _verify_all(self, links: List[str], page_url: str) -> List[LinkOutcome]:
        """Verify links in order; outcomes keep the order of ``links``."""
        if self.max_concurrent_links == 1:
            outcomes = []
            for link in links:
                self.logger.debug(f"Checking link: {link}")
                outcomes.append(await self.verifier.verify(link, page_url))
            return outcomes

        semaphore = asyncio.Semaphore(self.max_concurrent_links)

        async def verify_bounded(link: str) -> LinkOutcome:
            async with semaphore:
                self.logger.debug(f"Checking link: {link}")
                return await self.verifier.verify(link, page_url)

        return list(await asyncio.gather(*(verify_bounded(link) for link in links)))
