"""
Link extraction from HTML documents.
"""

import logging
from typing import Optional, Set
from urllib.parse import urljoin, urlparse, urlunparse
from bs4 import BeautifulSoup, SoupStrainer


# Parse only anchors that carry an href
ANCHOR_STRAINER = SoupStrainer('a', href=True)

CRAWLABLE_SCHEMES = ('http', 'https')


def normalize_url(url: str) -> Optional[str]:
    """
    Normalize an absolute URL for deduplication.

    Lowercases the host, defaults an empty path to ``/`` and drops the
    fragment. Returns None for non-HTTP URLs.

    Raises:
        ValueError: if the URL cannot be parsed (bad IPv6 host, bad port)
    """
    parsed = urlparse(url)

    if parsed.scheme.lower() not in CRAWLABLE_SCHEMES or not parsed.hostname:
        return None

    # Raises ValueError when the port is out of range
    if parsed.port == 0:
        return None

    return urlunparse((
        parsed.scheme.lower(),
        parsed.netloc.lower(),
        parsed.path or '/',
        parsed.params,
        parsed.query,
        ''  # Remove fragment
    ))


class LinkExtractor:
    """
    Extracts the absolute, same-origin hyperlink targets of a page.

    Two URLs are same-origin when their hostnames match; scheme and port are
    not compared.
    """

    def __init__(self, parser: str = 'lxml'):
        self.parser = parser
        self.logger = logging.getLogger(__name__)

    def extract_links(self, html_content: str, page_url: str) -> Set[str]:
        """
        Return the set of same-origin link targets found in ``html_content``.

        Args:
            html_content: Raw HTML of the page
            page_url: URL the page was fetched from, used to resolve relative hrefs

        Returns:
            Set of absolute URLs, fragments removed
        """
        if not html_content:
            return set()

        page_host = urlparse(page_url).hostname
        soup = BeautifulSoup(html_content, self.parser, parse_only=ANCHOR_STRAINER)

        links = set()
        for anchor in soup.find_all('a', href=True):
            href = anchor['href'].strip()
            if not href or href.startswith('#'):
                continue

            try:
                absolute_url = normalize_url(urljoin(page_url, href))
            except ValueError as e:
                self.logger.debug(f"Invalid URL found on {page_url}: {href!r} ({e})")
                continue

            if absolute_url and urlparse(absolute_url).hostname == page_host:
                links.add(absolute_url)

        self.logger.debug(f"Extracted {len(links)} same-origin links from {page_url}")
        return links
