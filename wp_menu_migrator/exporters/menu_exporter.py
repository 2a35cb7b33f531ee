"""
Export of WordPress menus to the portable JSON format.

The exported file is a list of menus, each with its theme location, name,
slug and a flat, ordered list of items.  Items keep their source id as
``slug`` and their parent's source id as ``parent`` so that the hierarchy
can be rebuilt, but targets are written by natural key (page slug, term
name) because ids do not survive a move between sites::

    [
      {
        "location": "primary",
        "name": "Main",
        "slug": "main",
        "items": [
          {"slug": "12", "title": "Home", "type": "custom", "url": "https://example.com/"},
          {"slug": "13", "parent": "12", "title": "About", "type": "post_type",
           "page": "about", "post_type": "page"}
        ]
      }
    ]
"""

from __future__ import annotations

import json
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional
from urllib.parse import urlparse

from wp_menu_migrator.clients.base import MenuStore, NavMenu, NavMenuItem
from wp_menu_migrator.models.menu_export import ADVANCED_FIELDS
from wp_menu_migrator.resolvers.item_resolver import TERM_LOOKUPS
from wp_menu_migrator.utils.errors import MenuMigrationError, log_message


def validate_filename(filename: Any) -> None:
    """Reject a filename option that was given without a usable value."""
    if filename is None:
        return
    if isinstance(filename, bool) or not str(filename).strip():
        raise MenuMigrationError("filename-empty")


def validate_export_options(menus: List[Any], export_all: bool, filename: Any = None) -> None:
    """Check the menu selection and filename options before anything is read or written."""
    if not menus and not export_all:
        raise MenuMigrationError("menu-not-specified")
    if menus and export_all:
        raise MenuMigrationError("wrong-params-usage")
    validate_filename(filename)


def default_filename(home_url: str, today: Optional[date] = None) -> str:
    """Build ``{host}-exported-menu-{YYYY-MM-DD}.json`` for the given site."""
    host = urlparse(home_url).hostname or "localhost"
    today = today or date.today()
    return f"{host}-exported-menu-{today.isoformat()}.json"


def _select_menus(store: MenuStore, identifiers: List[Any], export_all: bool, log: Callable[..., None]) -> List[NavMenu]:
    if export_all:
        return store.get_menus()
    menus: List[NavMenu] = []
    for identifier in identifiers:
        # identifier could be a name, slug or id
        menu = store.resolve_menu(identifier)
        if menu is None:
            log(f'Menu Export: The menu "{identifier}" does not exist.', "WARNING")
            continue
        menus.append(menu)
    return menus


def _export_item(item: NavMenuItem, store: MenuStore, term_lookup: str, log: Callable[..., None]) -> Dict[str, Any]:
    record: Dict[str, Any] = {
        "slug": str(item.id),
        "title": item.title,
        "type": item.type,
    }
    if item.parent:
        record["parent"] = str(item.parent)

    if item.type == "custom":
        record["url"] = item.url
    elif item.type == "post_type":
        post = store.get_content_object(item.object_id, item.object)
        if post is None:
            log(f'Menu Export: "{item.title}" points to a missing {item.object} ({item.object_id}).', "WARNING")
        else:
            record["page"] = post.name
            record["post_type"] = post.type
    elif item.type == "taxonomy":
        term = store.get_term(item.object_id, item.object)
        if term is None:
            log(f'Menu Export: "{item.title}" points to a missing {item.object} term ({item.object_id}).', "WARNING")
        else:
            record["taxonomy"] = term.taxonomy or item.object
            record["term"] = term.name if term_lookup == "name" else term.id

    for name in ADVANCED_FIELDS:
        value = getattr(item, name)
        if value:
            record[name] = list(value) if name == "classes" else value
    return record


def export_menus(
    store: MenuStore,
    menus: Iterable[Any] = (),
    *,
    export_all: bool = False,
    term_lookup: str = "name",
    log: Callable[..., None] = log_message,
) -> List[Dict[str, Any]]:
    """
    Build the export records for the requested menus.

    :param store: Backend the menus are read from.
    :param menus: Menu names, slugs or ids.  Mutually exclusive with
        ``export_all``.
    :param export_all: Export every menu on the site.
    :param term_lookup: ``"name"`` writes taxonomy terms by name, ``"id"``
        by term id.  Must match the setting used when importing.
    :return: One record per menu, in site order.
    :raises MenuMigrationError: ``menu-not-specified``, ``wrong-params-usage``
        or ``no-menus``.
    """
    identifiers = list(menus or [])
    validate_export_options(identifiers, export_all)
    if term_lookup not in TERM_LOOKUPS:
        raise MenuMigrationError("invalid-config", f"Unknown term lookup '{term_lookup}'.")

    log("Starting menu export process...")
    locations = store.get_location_bindings()
    selected = _select_menus(store, identifiers, export_all, log)
    if not selected:
        raise MenuMigrationError("no-menus")

    exporter: List[Dict[str, Any]] = []
    for menu in selected:
        location = next((key for key, menu_id in locations.items() if menu_id and menu_id == menu.id), False)
        export_menu: Dict[str, Any] = {
            "location": location,
            "name": menu.name,
            "slug": menu.slug,
            "items": [],
        }
        for item in sorted(store.get_items(menu), key=lambda i: i.menu_order):
            export_menu["items"].append(_export_item(item, store, term_lookup, log))
        log(f"Exported menu '{menu.name}' with {len(export_menu['items'])} items.")
        exporter.append(export_menu)
    return exporter


def write_export(records: List[Dict[str, Any]], filename: Optional[str] = None, *,
                 home_url: str = "", log: Callable[..., None] = log_message) -> str:
    """Serialize ``records`` to ``filename`` (or the default name) and return the path."""
    validate_filename(filename)
    path = filename or default_filename(home_url)
    log(f"Writing to file {path}")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(records, f, ensure_ascii=False, indent=2)
    return path
