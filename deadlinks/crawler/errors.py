"""
Exceptions raised by the crawler.
"""


class CrawlerError(Exception):
    """Base class for crawler errors."""


class ConfigError(CrawlerError):
    """Configuration is missing or invalid. Fatal to the run."""


class PageScanError(CrawlerError):
    """A page could not be fetched. Fatal to that page only."""

    def __init__(self, url: str, reason: str, status_code: int = 0):
        super().__init__(f"Failed to scan {url}: {reason}")
        self.url = url
        self.reason = reason
        self.status_code = status_code
