"""Tests for the command-line entry point."""

import json

import pytest

from deadlinks import __version__
from deadlinks.app import CrawlerApp, build_parser, main
from deadlinks.crawler.models import BrokenLink, SiteScanResult, SiteStats
from deadlinks.utils.config import Config, CrawlerConfig


def sample_result(start_url: str) -> SiteScanResult:
    link = BrokenLink(url=start_url + "gone", status=404, error="Not Found",
                      error_code="404", origin_page=start_url)
    return SiteScanResult(
        starting_url=start_url,
        all_broken_links=[link],
        stats=SiteStats(total_pages_scanned=1, total_working_links=2,
                        total_broken_links=1, unique_urls_found=1),
    )


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """Run from an empty directory with no seed URL in the environment."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv('HOME_PAGE', raising=False)
    monkeypatch.delenv('MAX_DEPTH', raising=False)
    monkeypatch.setattr('deadlinks.app.setup_logging', lambda *args, **kwargs: None)
    return tmp_path


@pytest.fixture
def fake_crawl(monkeypatch):
    seen = []

    async def crawl_site(config: CrawlerConfig) -> SiteScanResult:
        seen.append(config)
        return sample_result(config.start_url)

    monkeypatch.setattr('deadlinks.app.crawl_site', crawl_site)
    return seen


class TestParser:
    def test_defaults(self) -> None:
        args = build_parser().parse_args([])
        assert args.config == 'config.yaml'
        assert args.url is None
        assert args.max_depth is None
        assert not args.json

    def test_version(self, capsys) -> None:
        with pytest.raises(SystemExit) as excinfo:
            build_parser().parse_args(['--version'])
        assert excinfo.value.code == 0
        assert __version__ in capsys.readouterr().out


class TestMain:
    def test_missing_start_url_exits_with_error(self, isolated, capsys) -> None:
        assert main([]) == 1
        assert 'start URL' in capsys.readouterr().err

    def test_flags_reach_the_crawler(self, isolated, fake_crawl) -> None:
        assert main(['--url', 'https://ex.test/', '--max-depth', '3']) == 0
        assert fake_crawl[0].start_url == 'https://ex.test/'
        assert fake_crawl[0].max_depth == 3

    def test_json_result_on_stdout(self, isolated, fake_crawl, capsys) -> None:
        assert main(['--url', 'https://ex.test/', '--json']) == 0

        payload = json.loads(capsys.readouterr().out)
        assert payload['starting_url'] == 'https://ex.test/'
        assert payload['all_broken_links'][0]['error_code'] == '404'
        assert payload['stats']['total_pages_scanned'] == 1

    def test_non_numeric_setting_exits_with_error(self, isolated, capsys) -> None:
        (isolated / 'site.yaml').write_text(
            "crawler:\n  start_url: https://ex.test/\n  max_concurrent_links: \"many\"\n"
        )
        assert main(['--config', 'site.yaml']) == 1
        assert 'max_concurrent_links must be a positive number' in capsys.readouterr().err

    def test_seed_from_config_file(self, isolated, fake_crawl) -> None:
        (isolated / 'site.yaml').write_text("crawler:\n  start_url: https://file.test/\n")
        assert main(['--config', 'site.yaml']) == 0
        assert fake_crawl[0].start_url == 'https://file.test/'
        assert fake_crawl[0].max_depth == 1


@pytest.mark.asyncio
async def test_run_reports_crawl_failure(monkeypatch) -> None:
    async def crawl_site(config):
        raise RuntimeError("boom")

    monkeypatch.setattr('deadlinks.app.crawl_site', crawl_site)
    app = CrawlerApp()

    assert await app.run(Config(crawler=CrawlerConfig(start_url='https://ex.test/'))) == 1
    assert app.result is None
