"""
Exporters for WordPress menus.

This subpackage turns the menus of a site into the flat JSON records
consumed by :mod:`wp_menu_migrator.importers`.
"""

from .menu_exporter import default_filename, export_menus, validate_export_options, validate_filename, write_export

__all__ = ["default_filename", "export_menus", "validate_export_options", "validate_filename", "write_export"]
