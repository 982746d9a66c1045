#!/usr/bin/env python3
"""
Main entry point for the dead link crawler.
"""

import sys

from deadlinks.app import main


if __name__ == '__main__':
    sys.exit(main())
