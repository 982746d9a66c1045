"""
Result types produced by a crawl: verified links, page results and statistics.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Iterable, List, Optional, Set, Union


class ErrorKind(Enum):
    """Closed set of reasons a link can be broken."""
    HTTP_STATUS = "http_status"
    TIMEOUT = "timeout"
    DNS = "dns"
    TLS = "tls"
    TRANSPORT = "transport"
    UNKNOWN = "unknown"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Link:
    """A hyperlink target that has been verified."""
    url: str
    status: int
    timestamp: datetime = field(default_factory=utc_now)
    response_time_ms: Optional[int] = None

    @property
    def is_broken(self) -> bool:
        return False

    def to_dict(self) -> dict:
        return {
            'url': self.url,
            'status': self.status,
            'timestamp': self.timestamp.isoformat(),
            'response_time_ms': self.response_time_ms,
        }


@dataclass(frozen=True, kw_only=True)
class BrokenLink(Link):
    """A link whose probe failed, attributed to the page that referenced it."""
    error: str
    error_code: str
    origin_page: str
    kind: ErrorKind = ErrorKind.UNKNOWN

    def __post_init__(self):
        if not self.error_code:
            raise ValueError(f"BrokenLink for {self.url} requires an error_code")

    @property
    def is_broken(self) -> bool:
        return True

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            'error': self.error,
            'error_code': self.error_code,
            'origin_page': self.origin_page,
            'kind': self.kind.value,
        })
        return data


LinkOutcome = Union[Link, BrokenLink]


@dataclass(frozen=True)
class ScanStats:
    """Link counters for one page. working + broken always equals total."""
    total_links_scanned: int = 0
    working_links: int = 0
    broken_links: int = 0

    def __post_init__(self):
        if min(self.total_links_scanned, self.working_links, self.broken_links) < 0:
            raise ValueError("ScanStats counters must be non-negative")
        if self.working_links + self.broken_links != self.total_links_scanned:
            raise ValueError(
                f"Inconsistent ScanStats: {self.working_links} working + "
                f"{self.broken_links} broken != {self.total_links_scanned} total"
            )

    @classmethod
    def empty(cls) -> 'ScanStats':
        return cls()

    @classmethod
    def from_links(cls, outcomes: Iterable[LinkOutcome]) -> 'ScanStats':
        """Count a sequence of verification outcomes."""
        working = broken = 0
        for outcome in outcomes:
            if outcome.is_broken:
                broken += 1
            else:
                working += 1
        return cls(
            total_links_scanned=working + broken,
            working_links=working,
            broken_links=broken
        )

    def __add__(self, other: 'ScanStats') -> 'ScanStats':
        if not isinstance(other, ScanStats):
            return NotImplemented
        return ScanStats(
            total_links_scanned=self.total_links_scanned + other.total_links_scanned,
            working_links=self.working_links + other.working_links,
            broken_links=self.broken_links + other.broken_links
        )

    def to_dict(self) -> dict:
        return {
            'total_links_scanned': self.total_links_scanned,
            'working_links': self.working_links,
            'broken_links': self.broken_links,
        }


@dataclass
class PageScanResult:
    """Outcome of scanning a single page."""
    page_url: str
    broken_links: List[BrokenLink] = field(default_factory=list)
    found_links: Set[str] = field(default_factory=set)
    stats: ScanStats = field(default_factory=ScanStats.empty)

    def to_dict(self) -> dict:
        return {
            'page_url': self.page_url,
            'broken_links': [link.to_dict() for link in self.broken_links],
            'found_links': sorted(self.found_links),
            'stats': self.stats.to_dict(),
        }


@dataclass(frozen=True)
class SiteStats:
    """Totals across every page scanned in one crawl."""
    total_pages_scanned: int = 0
    total_working_links: int = 0
    total_broken_links: int = 0
    unique_urls_found: int = 0

    def fold(self, page_stats: ScanStats) -> 'SiteStats':
        """Return a new SiteStats with one more scanned page counted in."""
        return SiteStats(
            total_pages_scanned=self.total_pages_scanned + 1,
            total_working_links=self.total_working_links + page_stats.working_links,
            total_broken_links=self.total_broken_links + page_stats.broken_links,
            unique_urls_found=self.unique_urls_found
        )

    @property
    def total_links_scanned(self) -> int:
        return self.total_working_links + self.total_broken_links

    def to_dict(self) -> dict:
        return {
            'total_pages_scanned': self.total_pages_scanned,
            'total_working_links': self.total_working_links,
            'total_broken_links': self.total_broken_links,
            'unique_urls_found': self.unique_urls_found,
        }


@dataclass
class SiteScanResult:
    """Top-level result of a crawl, handed to the caller."""
    starting_url: str
    scanned_pages: Dict[str, PageScanResult] = field(default_factory=dict)
    all_broken_links: List[BrokenLink] = field(default_factory=list)
    stats: SiteStats = field(default_factory=SiteStats)

    def to_dict(self) -> dict:
        return {
            'starting_url': self.starting_url,
            'scanned_pages': {
                url: page.to_dict() for url, page in self.scanned_pages.items()
            },
            'all_broken_links': [link.to_dict() for link in self.all_broken_links],
            'stats': self.stats.to_dict(),
        }
