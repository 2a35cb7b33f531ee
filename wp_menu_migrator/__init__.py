"""
Top-level package for the WordPress menu export/import utility.

This package bundles everything required to export the navigation menus of
a WordPress site into a portable JSON file and rebuild them on another
site.  Modules are split into subpackages:

* :mod:`wp_menu_migrator.clients` – menu storage backends (REST API, dry-run)
* :mod:`wp_menu_migrator.models` – records describing the JSON file format
* :mod:`wp_menu_migrator.resolvers` – menu item target resolution by natural key
* :mod:`wp_menu_migrator.exporters` – menus to JSON records
* :mod:`wp_menu_migrator.importers` – JSON records back to menus
* :mod:`wp_menu_migrator.utils` – error codes, logging and reports

Each layer has no direct knowledge of configuration or execution strategy;
orchestration is handled in :mod:`wp_menu_migrator.migration_tool`.
"""
