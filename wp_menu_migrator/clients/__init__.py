"""
Menu storage backends.

This subpackage defines the :class:`~wp_menu_migrator.clients.base.MenuStore`
interface consumed by the exporter and importer, a backend talking to the
WordPress REST API, and a dry-run wrapper that only logs writes.
"""

from .base import ContentObject, MenuStore, MenuStoreError, NavMenu, NavMenuItem, Term
from .dry_run import DryRunMenuStore
from .wordpress_api import WordPressMenuStore

__all__ = [
    "ContentObject",
    "DryRunMenuStore",
    "MenuStore",
    "MenuStoreError",
    "NavMenu",
    "NavMenuItem",
    "Term",
    "WordPressMenuStore",
]
