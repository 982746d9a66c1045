"""
Site crawler that drives breadth-first scanning wave by wave.
"""

import asyncio
import logging
import time
from dataclasses import replace
from typing import List, Optional, Union

from .errors import PageScanError
from .models import PageScanResult, SiteScanResult
from .parser import normalize_url
from .scanner import PageScanner
from .url_frontier import URLFrontier
from ..utils.report import log_report


PageOutcome = Union[PageScanResult, Exception]


class SiteCrawler:
    """
    Crawls a site breadth-first from a starting URL.

    Depth 0 is the starting page; depth d is every page first discovered on a
    depth d-1 page. The crawl stops after ``max_depth`` waves or as soon as
    the frontier runs dry. A page that fails to scan is logged and skipped.

    With ``max_concurrent_pages`` above 1 the pages of a wave are scanned
    concurrently; their results are still merged one by one, in wave order,
    once the whole wave is done.
    """

    def __init__(self, scanner: PageScanner, max_concurrent_pages: int = 1):
        if max_concurrent_pages < 1:
            raise ValueError("max_concurrent_pages must be at least 1")
        self.scanner = scanner
        self.max_concurrent_pages = max_concurrent_pages
        self.logger = logging.getLogger(__name__)
        self.last_frontier: Optional[URLFrontier] = None

    async def scan(self, start_url: str, max_depth: int,
                   frontier: Optional[URLFrontier] = None) -> SiteScanResult:
        """
        Crawl from ``start_url`` for at most ``max_depth`` waves.

        Args:
            start_url: Seed page
            max_depth: Number of breadth-first waves to process
            frontier: Frontier to use; a fresh one is created when omitted

        Returns:
            SiteScanResult with every page scanned before the crawl stopped
        """
        start_url = normalize_url(start_url) or start_url
        frontier = frontier if frontier is not None else URLFrontier()
        self.last_frontier = frontier
        result = SiteScanResult(starting_url=start_url)
        start_time = time.time()

        frontier.seed(start_url)
        current_depth = 0

        while current_depth < max_depth and not frontier.is_empty():
            wave = [url for url in frontier.take_wave() if url not in frontier.visited]
            self.logger.info(f"Processing depth {current_depth} - URLs to scan: {len(wave)}")

            if self.max_concurrent_pages == 1:
                for url in wave:
                    self.logger.info(f"Scanning page: {url}")
                    outcome = await self._scan_one(url)
                    self._merge(url, outcome, frontier, result)
            else:
                outcomes = await self._scan_wave(wave)
                for url, outcome in zip(wave, outcomes):
                    self._merge(url, outcome, frontier, result)

            self.logger.info(
                f"Completed depth {current_depth} - Scanned {len(wave)} URLs, "
                f"{len(frontier.pending)} queued for next depth"
            )
            current_depth += 1

        if not frontier.is_empty():
            self.logger.info(
                f"Max depth {max_depth} reached with {len(frontier.pending)} URLs left unexplored"
            )

        result.stats = replace(result.stats, unique_urls_found=len(frontier.visited))
        self.logger.info(f"Crawl finished in {time.time() - start_time:.2f} seconds")
        log_report(result, self.logger)
        return result

    async def _scan_one(self, url: str) -> PageOutcome:
        try:
            return await self.scanner.scan_page(url)
        except PageScanError as e:
            return e
        except Exception as e:
            self.logger.error(f"Unexpected error scanning {url}: {e}", exc_info=True)
            return e

    async def _scan_wave(self, wave: List[str]) -> List[PageOutcome]:
        semaphore = asyncio.Semaphore(self.max_concurrent_pages)

        async def scan_bounded(url: str) -> PageOutcome:
            async with semaphore:
                self.logger.info(f"Scanning page: {url}")
                return await self._scan_one(url)

        return list(await asyncio.gather(*(scan_bounded(url) for url in wave)))

    def _merge(self, url: str, outcome: PageOutcome, frontier: URLFrontier,
               result: SiteScanResult):
        """Fold one page outcome into the running result. Only the crawler calls this."""
        if isinstance(outcome, Exception):
            self.logger.info(f"Error scanning {url}: {outcome}")
            frontier.mark_failed(url)
            return

        result.scanned_pages[url] = outcome
        result.stats = result.stats.fold(outcome.stats)

        self.logger.info(
            f"Page {url}: {outcome.stats.working_links} working, "
            f"{outcome.stats.broken_links} broken"
        )
        for link in outcome.broken_links:
            self.logger.info(f"  {link.url} - Error: {link.error_code}, {link.error}")
        result.all_broken_links.extend(outcome.broken_links)

        frontier.enqueue(outcome.found_links)
        frontier.mark_visited(url)
