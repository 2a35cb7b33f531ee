"""
High-level orchestration of WordPress menu export and import.

This module defines a :class:`MenuMigrationTool` class that ties together
the storage backend, exporter, importer and reporting utilities.  It reads
configuration, writes the run log, validates command options before any
work is done, and writes the export file or the id map report.

Configuration is supplied via a JSON file path or directly as a
dictionary.  The ``wordpress`` section holds ``base_url``, ``username`` and
``application_password``.  Migration settings (dry-run, overwrite, term
matching, parent resolution) live under the ``migration`` key.
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Iterable, List, Optional

from wp_menu_migrator.clients.base import MenuStore
from wp_menu_migrator.clients.dry_run import DryRunMenuStore
from wp_menu_migrator.clients.wordpress_api import WordPressMenuStore
from wp_menu_migrator.exporters.menu_exporter import default_filename, export_menus, validate_export_options, write_export
from wp_menu_migrator.importers.menu_importer import PARENT_RESOLUTIONS, MenuImportResult, import_menus
from wp_menu_migrator.resolvers.item_resolver import TERM_LOOKUPS
from wp_menu_migrator.utils.errors import MenuMigrationError, log_message, set_report_dir
from wp_menu_migrator.utils.id_map import generate_id_map_csv
from wp_menu_migrator.utils.pre_flight_checks import run_wordpress_pre_flight_checks


class MenuMigrationTool:
    """
    Encapsulates configuration and the export/import entry points.  The
    backend defaults to :class:`WordPressMenuStore` built from the
    ``wordpress`` configuration section; tests and previews pass their own.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None, *, config_file: Optional[str] = None,
                 store: Optional[MenuStore] = None) -> None:
        if config_file and os.path.exists(config_file):
            with open(config_file, "r", encoding="utf-8") as f:
                config = json.load(f)
        elif config is None:
            config = {}

        # Ensure essential keys exist to prevent KeyErrors
        config.setdefault("wordpress", {})
        config["wordpress"].setdefault("base_url", os.getenv("WP_BASE_URL", ""))
        config["wordpress"].setdefault("username", os.getenv("WP_USERNAME", ""))
        config["wordpress"].setdefault("application_password", os.getenv("WP_APP_PASSWORD", ""))
        config["wordpress"].setdefault("timeout", 30)
        config["wordpress"].setdefault("rpm", 180)

        config.setdefault("migration", {})
        config["migration"].setdefault("dry_run", False)
        config["migration"].setdefault("overwrite", False)
        config["migration"].setdefault("term_lookup", "name")
        config["migration"].setdefault("parent_resolution", "single_pass")
        config["migration"].setdefault("export_dir", ".")
        config["migration"].setdefault("reports_dir", os.path.join("reports", "migration"))

        if config["migration"]["term_lookup"] not in TERM_LOOKUPS:
            raise MenuMigrationError("invalid-config", f"term_lookup must be one of {', '.join(TERM_LOOKUPS)}.")
        if config["migration"]["parent_resolution"] not in PARENT_RESOLUTIONS:
            raise MenuMigrationError("invalid-config", f"parent_resolution must be one of {', '.join(PARENT_RESOLUTIONS)}.")

        self.config = config
        self.reports_dir = config["migration"]["reports_dir"]
        set_report_dir(self.reports_dir)
        self._store = store

    @property
    def store(self) -> MenuStore:
        if self._store is None:
            self._store = WordPressMenuStore(self.config["wordpress"])
        return self._store

    def log_message(self, message: str, level: str = "INFO") -> None:
        log_message(message, level)

    def run_pre_flight_checks(self) -> None:
        run_wordpress_pre_flight_checks(self.config)

    def export(self, menus: Iterable[Any] = (), *, export_all: bool = False, filename: Any = None) -> str:
        """
        Export the requested menus to a JSON file and return its path.

        ``filename`` defaults to ``{host}-exported-menu-{date}.json`` inside
        the configured ``export_dir``.  Option errors are raised before the
        site is contacted and before any file is written.
        """
        menus = list(menus or [])
        validate_export_options(menus, export_all, filename)

        records = export_menus(
            self.store,
            menus,
            export_all=export_all,
            term_lookup=self.config["migration"]["term_lookup"],
            log=self.log_message,
        )
        if filename is None:
            filename = os.path.join(self.config["migration"]["export_dir"], default_filename(self.store.home_url()))
        path = write_export(records, filename, log=self.log_message)
        self.log_message(f"Exported {len(records)} menus to {os.path.abspath(path)}")
        return path

    def load_file(self, file_path: str) -> Any:
        if not os.path.exists(file_path):
            raise MenuMigrationError("file-not-found")
        with open(file_path, "r", encoding="utf-8") as f:
            try:
                return json.load(f)
            except json.JSONDecodeError as e:
                raise MenuMigrationError("invalid-json", f"The file to import is not valid JSON: {e}") from e

    def import_file(self, file_path: str, *, overwrite: Optional[bool] = None, dry_run: Optional[bool] = None,
                    parent_resolution: Optional[str] = None) -> List[MenuImportResult]:
        """
        Import the menus of an export file.

        ``overwrite``, ``dry_run`` and ``parent_resolution`` fall back to the
        ``migration`` configuration when not given.  Returns one result per
        menu in the file and writes the slug -> id map report.
        """
        decoded = self.load_file(file_path)
        migration = self.config["migration"]
        if overwrite is None:
            overwrite = migration["overwrite"]
        if dry_run is None:
            dry_run = migration["dry_run"]

        self.log_message("Starting menu import from " + file_path)
        self.log_message("The import might not work properly if the target site lacks the referenced pages or terms.", "WARNING")

        store: MenuStore = DryRunMenuStore(self.store, log=self.log_message) if dry_run else self.store
        results = import_menus(
            decoded,
            store,
            overwrite=overwrite,
            term_lookup=migration["term_lookup"],
            parent_resolution=parent_resolution or migration["parent_resolution"],
            log=self.log_message,
        )

        for result in results:
            if result.imported:
                self.log_message(
                    f"Menu '{result.name}' -> id {result.menu_id}: {result.created} items created, "
                    f"{len(result.skipped_items)} skipped."
                )
            else:
                self.log_message(f"Menu '{result.name}' skipped ({result.reason}).", "WARNING")

        if not dry_run:
            try:
                path = generate_id_map_csv(results, out_path=os.path.join(os.path.dirname(self.reports_dir) or ".", "menu_id_map.csv"))
                self.log_message(f"Item id map written to {path}")
            except OSError as e:
                self.log_message(f"Failed to write item id map: {e}", "ERROR")
        return results
