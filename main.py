"""
linepatch - reformat a file in place, rewriting only the lines that changed.

Entry point for running from a source checkout.
"""

import sys

from linepatch.cli import main


if __name__ == '__main__':
    sys.exit(main())
