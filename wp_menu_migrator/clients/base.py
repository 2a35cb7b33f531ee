"""
Interface between the export/import core and a menu storage backend.

The core never talks HTTP itself.  It calls the methods of a
:class:`MenuStore`, which is implemented for a live site by
:class:`~wp_menu_migrator.clients.wordpress_api.WordPressMenuStore` and
wrapped by :class:`~wp_menu_migrator.clients.dry_run.DryRunMenuStore` for
previews.  Every method may raise :class:`MenuStoreError`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Union


class MenuStoreError(Exception):
    """A storage backend call failed."""


@dataclass
class NavMenu:
    id: int
    name: str
    slug: str


@dataclass
class NavMenuItem:
    id: int
    title: str
    type: str
    object: str = ""
    object_id: int = 0
    parent: int = 0
    url: str = ""
    menu_order: int = 0
    target: str = ""
    attr_title: str = ""
    description: str = ""
    classes: List[str] = field(default_factory=list)
    xfn: str = ""


@dataclass
class ContentObject:
    id: int
    name: str
    title: str
    type: str


@dataclass
class Term:
    id: int
    name: str
    taxonomy: str


class MenuStore(Protocol):
    def home_url(self) -> str: ...

    def get_location_bindings(self) -> Dict[str, int]: ...

    def get_menus(self) -> List[NavMenu]: ...

    def resolve_menu(self, identifier: Union[int, str]) -> Optional[NavMenu]: ...

    def create_menu(self, name: str) -> int: ...

    def delete_menu(self, identifier: Union[int, str]) -> bool: ...

    def get_items(self, menu: NavMenu) -> List[NavMenuItem]: ...

    def create_or_update_item(self, menu_id: int, item_id: int, fields: Dict[str, Any]) -> int: ...

    def associate_item_with_menu(self, item_id: int, menu_id: int) -> None: ...

    def set_location_binding(self, location: str, menu_id: int) -> None: ...

    def find_content_object(self, name: str, type_key: Optional[str] = None) -> Optional[ContentObject]: ...

    def find_term(self, taxonomy: str, value: Union[int, str], by: str = "name") -> Optional[Term]: ...

    def get_content_object(self, object_id: int, type_key: str) -> Optional[ContentObject]: ...

    def get_term(self, term_id: int, taxonomy: str) -> Optional[Term]: ...
