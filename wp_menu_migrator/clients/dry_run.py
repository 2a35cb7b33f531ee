"""
Preview backend for ``import --dry-run``.

:class:`DryRunMenuStore` wraps a real store.  Every lookup is answered by
the wrapped store, so a preview finds (or misses) the same pages, terms and
menus as a real import would, while every write is only logged.  Menus
"created" during the preview are remembered locally so later lookups in the
same run can find them.
"""

from __future__ import annotations

import itertools
from typing import Any, Callable, Dict, List, Optional, Union

from wp_menu_migrator.clients.base import ContentObject, MenuStore, NavMenu, NavMenuItem, Term
from wp_menu_migrator.models.menu_export import _slugify
from wp_menu_migrator.utils.errors import log_message


class DryRunMenuStore:
    """
    Read-through wrapper that never writes to the wrapped store.

    Lookups are delegated so a preview resolves pages, terms and menus
    exactly like a real import would.  Writes are logged and answered with
    synthetic negative ids.
    """

    def __init__(self, store: MenuStore, *, log: Callable[..., None] = log_message) -> None:
        self.store = store
        self.log = log
        self._ids = itertools.count(1)
        self._menus: Dict[int, NavMenu] = {}

    def _next_id(self) -> int:
        return -next(self._ids)

    def home_url(self) -> str:
        return self.store.home_url()

    def get_location_bindings(self) -> Dict[str, int]:
        return self.store.get_location_bindings()

    def get_menus(self) -> List[NavMenu]:
        return self.store.get_menus() + list(self._menus.values())

    def resolve_menu(self, identifier: Union[int, str]) -> Optional[NavMenu]:
        for menu in self._menus.values():
            if identifier in (menu.id, menu.name, menu.slug):
                return menu
        if isinstance(identifier, int) and identifier < 0:
            return None
        return self.store.resolve_menu(identifier)

    def create_menu(self, name: str) -> int:
        menu = NavMenu(id=self._next_id(), name=name, slug=_slugify(name))
        self._menus[menu.id] = menu
        self.log(f"Dry-run: would create menu '{name}'")
        return menu.id

    def delete_menu(self, identifier: Union[int, str]) -> bool:
        if self.store.resolve_menu(identifier) is None:
            return False
        self.log(f"Dry-run: would delete menu '{identifier}'")
        return True

    def get_items(self, menu: NavMenu) -> List[NavMenuItem]:
        if menu.id in self._menus:
            return []
        return self.store.get_items(menu)

    def create_or_update_item(self, menu_id: int, item_id: int, fields: Dict[str, Any]) -> int:
        if item_id:
            self.log(f"Dry-run: would update menu item {item_id} with parent {fields.get('parent', 0)}")
            return item_id
        self.log(f"Dry-run: would create menu item '{fields.get('title')}' in menu {menu_id}")
        return self._next_id()

    def associate_item_with_menu(self, item_id: int, menu_id: int) -> None:
        self.log(f"Dry-run: would add menu item {item_id} to menu {menu_id}")

    def set_location_binding(self, location: str, menu_id: int) -> None:
        self.log(f"Dry-run: would assign location '{location}' to menu {menu_id}")

    def find_content_object(self, name: str, type_key: Optional[str] = None) -> Optional[ContentObject]:
        return self.store.find_content_object(name, type_key)

    def find_term(self, taxonomy: str, value: Union[int, str], by: str = "name") -> Optional[Term]:
        return self.store.find_term(taxonomy, value, by)

    def get_content_object(self, object_id: int, type_key: str) -> Optional[ContentObject]:
        return self.store.get_content_object(object_id, type_key)

    def get_term(self, term_id: int, taxonomy: str) -> Optional[Term]:
        return self.store.get_term(term_id, taxonomy)
