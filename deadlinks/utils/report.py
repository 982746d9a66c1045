"""
Plain-text rendering of crawl results for the log.
"""

import logging
from typing import List, Sequence, Union

from tabulate import tabulate

from ..crawler.models import BrokenLink, SiteScanResult, SiteStats


# (header, max width) per column of the broken links table
TABLE_COLUMNS = (
    ('URL', 40),
    ('Origin Page', 40),
    ('Error Code', 14),
    ('Error Message', 30),
)


def _truncate(value: str, width: int) -> str:
    # Cells stay on one line so each broken link is one table row
    value = value.replace('\n', ' ')
    return value if len(value) <= width else value[:width - 1] + '…'


def format_broken_links_table(links: Sequence[BrokenLink]) -> List[str]:
    """Return the boxed summary table of broken links, one string per line."""
    if not links:
        return []

    rows = [
        [_truncate(value, width) for value, (_, width) in
         zip((link.url, link.origin_page, link.error_code, link.error), TABLE_COLUMNS)]
        for link in links
    ]
    table = tabulate(
        rows,
        headers=[header for header, _ in TABLE_COLUMNS],
        tablefmt='double_outline',
        disable_numparse=True
    )
    return ['Final Broken Links Summary:'] + table.splitlines()


def format_statistics(stats: SiteStats) -> List[str]:
    """Return the aggregate statistics block, one string per line."""
    return [
        '************ Scan Statistics ************',
        f'Total Pages Scanned:     {stats.total_pages_scanned}',
        f'Total Links Scanned:     {stats.total_links_scanned}',
        f'Total Working Links:     {stats.total_working_links}',
        f'Total Broken Links:      {stats.total_broken_links}',
        f'Total Unique URLs Found: {stats.unique_urls_found}',
    ]


def log_report(result: SiteScanResult,
               logger: Union[logging.Logger, logging.LoggerAdapter]):
    """Write the broken links table and statistics for ``result`` to ``logger``."""
    for line in format_broken_links_table(result.all_broken_links):
        logger.info(line)
    for line in format_statistics(result.stats):
        logger.info(line)
