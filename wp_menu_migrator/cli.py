"""
Command line interface for the menu migrator.

Usage:
  wp-menu-migrator export <menu>... [--filename=<name>]
  wp-menu-migrator export --all [--filename=<name>]
  wp-menu-migrator import <file> [--overwrite] [--dry-run | --no-dry-run] [--two-pass]

Both commands accept ``--config`` (default ``config/migration_config.json``)
and ``--skip-checks`` to bypass the pre-flight checks against the site.
"""

from __future__ import annotations

import argparse
import os
import sys
from typing import List, Optional

from wp_menu_migrator.exporters.menu_exporter import validate_export_options
from wp_menu_migrator.migration_tool import MenuMigrationTool
from wp_menu_migrator.utils.errors import MenuMigrationError
from wp_menu_migrator.utils.pre_flight_checks import PreFlightCheckError

CONFIG_FILE = "config/migration_config.json"


def build_parser() -> argparse.ArgumentParser:
    base = argparse.ArgumentParser(add_help=False)
    base.add_argument("--config", default=CONFIG_FILE, help="Path to the JSON configuration file")
    base.add_argument("--skip-checks", action="store_true", help="Do not run the pre-flight checks")

    p = argparse.ArgumentParser(
        prog="wp-menu-migrator",
        description="Export WordPress menus to JSON and import them on another site.",
    )
    sub = p.add_subparsers(dest="command", required=True)

    export = sub.add_parser("export", parents=[base], help="Export menus to a JSON file")
    export.add_argument("menus", nargs="*", help="Menu names, slugs or ids")
    export.add_argument("--all", dest="export_all", action="store_true", help="Export every menu")
    # --filename without a value is rejected later as filename-empty
    export.add_argument("--filename", nargs="?", const=True, default=None, help="File to write")

    imp = sub.add_parser("import", parents=[base], help="Import menus from a JSON file")
    imp.add_argument("file", help="Exported menu JSON file")
    imp.add_argument("--overwrite", action="store_true", default=None, help="Delete same-slug menus first")
    imp.add_argument("--dry-run", dest="dry_run", action="store_true", help="Only log what would change")
    imp.add_argument("--no-dry-run", dest="dry_run", action="store_false", help="Force real API calls")
    imp.add_argument("--two-pass", dest="parent_resolution", action="store_const", const="two_pass",
                     default=None, help="Create all items first, then attach children to their parents")
    imp.set_defaults(dry_run=None)  # None -> decided by the config
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        if args.command == "export":
            validate_export_options(args.menus, args.export_all, args.filename)
        elif not os.path.exists(args.file):
            raise MenuMigrationError("file-not-found")
        tool = MenuMigrationTool(config_file=args.config)
        if not args.skip_checks:
            tool.run_pre_flight_checks()

        if args.command == "export":
            path = tool.export(args.menus, export_all=args.export_all, filename=args.filename)
            print(f"Success: Export complete ({path}).")
        else:
            tool.import_file(
                args.file,
                overwrite=args.overwrite,
                dry_run=args.dry_run,
                parent_resolution=args.parent_resolution,
            )
            print("Success: The import was successful.")
    except (MenuMigrationError, PreFlightCheckError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
