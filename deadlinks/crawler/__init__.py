"""
Crawler core components.
"""

from .errors import CrawlerError, ConfigError, PageScanError
from .fetcher import WebFetcher, FetchResult, ProbeResult
from .models import (
    BrokenLink, ErrorKind, Link, PageScanResult, ScanStats, SiteScanResult, SiteStats
)
from .parser import LinkExtractor, normalize_url
from .scanner import PageScanner
from .scheduler import SiteCrawler
from .url_frontier import URLFrontier
from .verifier import LinkVerifier, LinkError, classify_error, classify_status

__all__ = [
    'CrawlerError', 'ConfigError', 'PageScanError',
    'WebFetcher', 'FetchResult', 'ProbeResult',
    'BrokenLink', 'ErrorKind', 'Link', 'PageScanResult', 'ScanStats',
    'SiteScanResult', 'SiteStats',
    'LinkExtractor', 'normalize_url', 'PageScanner', 'SiteCrawler', 'URLFrontier',
    'LinkVerifier', 'LinkError', 'classify_error', 'classify_status'
]
