"""
Records describing the menu export file format.
"""

from .menu_export import MenuItemRecord, MenuRecord, load_menu_records

__all__ = ["MenuItemRecord", "MenuRecord", "load_menu_records"]
