"""
Command-line application for the dead link crawler.
"""

import asyncio
import argparse
import json
import logging
import sys
from typing import List, Optional

from . import __version__
from .crawler.errors import ConfigError
from .crawler.fetcher import WebFetcher
from .crawler.models import SiteScanResult
from .crawler.parser import LinkExtractor
from .crawler.scanner import PageScanner
from .crawler.scheduler import SiteCrawler
from .crawler.verifier import LinkVerifier
from .utils.config import Config, CrawlerConfig, load_config
from .utils.logger import setup_logging


async def crawl_site(config: CrawlerConfig) -> SiteScanResult:
    """Build the crawler components from ``config`` and crawl the configured site."""
    async with WebFetcher(
        user_agent=config.user_agent,
        request_timeout=config.page_timeout,
        max_concurrent_requests=config.max_concurrent_pages * config.max_concurrent_links,
        accept=config.accept,
        accept_language=config.accept_language,
        max_content_size=config.max_content_size
    ) as fetcher:
        scanner = PageScanner(
            fetcher,
            LinkExtractor(),
            LinkVerifier(fetcher, timeout=config.link_timeout),
            max_concurrent_links=config.max_concurrent_links
        )
        crawler = SiteCrawler(scanner, max_concurrent_pages=config.max_concurrent_pages)
        return await crawler.scan(config.start_url, config.max_depth)


class CrawlerApp:
    """Main application class for the dead link crawler."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self.result: Optional[SiteScanResult] = None

    async def run(self, config: Config, print_json: bool = False) -> int:
        """Run one crawl. Returns the process exit status."""
        crawler_config = config.crawler

        self.logger.info("=== DEAD LINK CRAWLER STARTING ===")
        self.logger.info(f"Starting scan from: {crawler_config.start_url}")
        self.logger.info(f"Max depth: {crawler_config.max_depth}")
        self.logger.info(f"Link timeout: {crawler_config.link_timeout}s")
        self.logger.info(f"Max concurrent pages: {crawler_config.max_concurrent_pages}, "
                         f"links: {crawler_config.max_concurrent_links}")

        try:
            self.result = await crawl_site(crawler_config)
        except Exception as e:
            self.logger.error(f"Scan failed: {e}", exc_info=True)
            return 1
        finally:
            self.logger.info("=== DEAD LINK CRAWLER FINISHED ===")

        if print_json:
            print(json.dumps(self.result.to_dict(), ensure_ascii=False, indent=2))

        return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='deadlinks',
        description="Crawl a website breadth-first and report broken links",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  deadlinks --url https://example.com          # Scan the home page only
  deadlinks --url https://example.com --max-depth 3
  HOME_PAGE=https://example.com deadlinks      # Seed URL from the environment
  deadlinks --config my_config.yaml --json     # Print the result as JSON
        """
    )

    parser.add_argument(
        '--config',
        default='config.yaml',
        help='Path to configuration file (default: config.yaml, optional)'
    )

    parser.add_argument(
        '--url',
        help='Seed URL to start crawling from (overrides HOME_PAGE)'
    )

    parser.add_argument(
        '--max-depth',
        help='Number of breadth-first waves to crawl (overrides MAX_DEPTH, default: 1)'
    )

    parser.add_argument(
        '--log-level',
        help='Log level (DEBUG, INFO, WARNING, ERROR)'
    )

    parser.add_argument(
        '--json-logs',
        action='store_true',
        help='Emit log records as JSON'
    )

    parser.add_argument(
        '--json',
        action='store_true',
        help='Print the scan result as JSON to stdout'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'Dead Link Crawler {__version__}'
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config, overrides={
            'start_url': args.url,
            'max_depth': args.max_depth,
        })
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    if args.log_level:
        config.logging.level = args.log_level
    # Keep stdout clean for the JSON result
    setup_logging(
        config.logging,
        enable_json=True if args.json_logs else None,
        stream=sys.stderr if args.json else None
    )

    app = CrawlerApp()
    try:
        return asyncio.run(app.run(config, print_json=args.json))
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 1
