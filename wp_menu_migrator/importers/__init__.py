"""
Importers rebuilding WordPress menus from export files.
"""

from .menu_importer import ImportContext, MenuImportResult, SlugIdMap, import_menu, import_menus

__all__ = ["ImportContext", "MenuImportResult", "SlugIdMap", "import_menu", "import_menus"]
