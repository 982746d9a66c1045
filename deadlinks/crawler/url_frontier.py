"""
URL frontier for breadth-first crawling.
Tracks which pages are visited, queued, pending for the next wave, or failed.
"""

import logging
from typing import Dict, Iterable, List, Set


class URLFrontier:
    """
    Explicit frontier state owned by one crawl.

    ``pending`` holds the next wave in discovery order. A URL enters
    ``queued`` at most once and leaves it when it is marked ``visited`` or
    ``failed``. ``visited`` and ``queued`` never overlap, and a URL in any of
    the three sets is never enqueued again.
    """

    def __init__(self):
        self.visited: Set[str] = set()
        self.queued: Set[str] = set()
        self.failed: Set[str] = set()
        self.pending: List[str] = []
        self.logger = logging.getLogger(__name__)

    def seed(self, url: str) -> bool:
        """Add the starting URL."""
        return self.enqueue([url]) == 1

    def is_known(self, url: str) -> bool:
        return url in self.visited or url in self.queued or url in self.failed

    def enqueue(self, urls: Iterable[str]) -> int:
        """
        Queue URLs for the next wave.
        Returns the number of URLs that were actually added.
        """
        added = 0
        for url in urls:
            if self.is_known(url):
                continue
            self.pending.append(url)
            self.queued.add(url)
            added += 1

        if added:
            self.logger.debug(f"Queued {added} new URLs")
        return added

    def take_wave(self) -> List[str]:
        """
        Snapshot and clear the pending list; the next wave accumulates separately.
        URLs of the taken wave stay in ``queued`` until marked visited or failed.
        """
        wave = self.pending
        self.pending = []
        return wave

    def mark_visited(self, url: str):
        self.queued.discard(url)
        self.visited.add(url)

    def mark_failed(self, url: str):
        self.queued.discard(url)
        self.failed.add(url)

    def is_empty(self) -> bool:
        return not self.pending

    def get_stats(self) -> Dict[str, int]:
        """Get frontier statistics."""
        return {
            'total_queued': len(self.pending),
            'total_visited': len(self.visited),
            'total_failed': len(self.failed),
        }
