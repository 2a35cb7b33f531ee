"""
Entry point for the WordPress menu migration tool.
"""

import sys

from wp_menu_migrator.cli import main

if __name__ == "__main__":
    sys.exit(main())
