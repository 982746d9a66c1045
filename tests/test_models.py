"""Tests for the result data model."""

from dataclasses import FrozenInstanceError

import pytest

from deadlinks.crawler.models import (
    BrokenLink, ErrorKind, Link, PageScanResult, ScanStats, SiteScanResult, SiteStats
)


def _broken(url: str = "https://ex.test/b", code: str = "404") -> BrokenLink:
    return BrokenLink(
        url=url,
        status=404,
        error="Not Found",
        error_code=code,
        origin_page="https://ex.test/",
        kind=ErrorKind.HTTP_STATUS
    )


class TestLinks:
    def test_link_is_immutable(self) -> None:
        link = Link(url="https://ex.test/a", status=200)
        with pytest.raises(FrozenInstanceError):
            link.status = 404  # type: ignore[misc]

    def test_broken_link_extends_link(self) -> None:
        broken = _broken()
        assert isinstance(broken, Link)
        assert broken.is_broken
        assert not Link(url="https://ex.test/a", status=200).is_broken

    def test_broken_link_requires_error_code(self) -> None:
        with pytest.raises(ValueError):
            _broken(code="")

    def test_broken_link_to_dict(self) -> None:
        data = _broken().to_dict()
        assert data["error_code"] == "404"
        assert data["origin_page"] == "https://ex.test/"
        assert data["kind"] == "http_status"
        assert data["response_time_ms"] is None


class TestScanStats:
    def test_from_links_counts_outcomes(self) -> None:
        outcomes = [Link(url="https://ex.test/a", status=200), _broken(), _broken("https://ex.test/c")]
        stats = ScanStats.from_links(outcomes)
        assert stats == ScanStats(total_links_scanned=3, working_links=1, broken_links=2)

    def test_empty(self) -> None:
        assert ScanStats.from_links([]) == ScanStats.empty()

    def test_rejects_inconsistent_counters(self) -> None:
        with pytest.raises(ValueError):
            ScanStats(total_links_scanned=3, working_links=1, broken_links=1)

    def test_rejects_negative_counters(self) -> None:
        with pytest.raises(ValueError):
            ScanStats(total_links_scanned=0, working_links=1, broken_links=-1)

    def test_addition_merges(self) -> None:
        total = ScanStats(2, 1, 1) + ScanStats(3, 3, 0)
        assert total == ScanStats(5, 4, 1)


class TestSiteStats:
    def test_fold_returns_new_value(self) -> None:
        start = SiteStats()
        folded = start.fold(ScanStats(3, 2, 1)).fold(ScanStats(1, 0, 1))
        assert start == SiteStats()
        assert folded.total_pages_scanned == 2
        assert folded.total_working_links == 2
        assert folded.total_broken_links == 2
        assert folded.total_links_scanned == 4


def test_site_scan_result_to_dict() -> None:
    page = PageScanResult(
        page_url="https://ex.test/",
        broken_links=[_broken()],
        found_links={"https://ex.test/b", "https://ex.test/a"},
        stats=ScanStats(2, 1, 1)
    )
    result = SiteScanResult(
        starting_url="https://ex.test/",
        scanned_pages={page.page_url: page},
        all_broken_links=list(page.broken_links),
        stats=SiteStats().fold(page.stats)
    )

    data = result.to_dict()

    assert data["scanned_pages"]["https://ex.test/"]["found_links"] == [
        "https://ex.test/a", "https://ex.test/b"
    ]
    assert data["all_broken_links"][0]["url"] == "https://ex.test/b"
    assert data["stats"]["total_broken_links"] == 1
