"""
Main entry point for the geotiling package.

Allows running: python -m geotiling <command>
"""

import sys
from geotiling.cli import main

if __name__ == "__main__":
    sys.exit(main())
