"""
Dead Link Crawler

Crawls a website breadth-first from a seed URL and reports broken links.
"""

__version__ = "1.0.0"
__description__ = "A breadth-first crawler that finds broken links across a website"
