"""
Rebuild of WordPress menus from an export file.

Menus are processed one after the other and their items strictly in file
order.  Every created item is recorded in a :class:`SlugIdMap` under its
source ``slug`` so that later items naming it as ``parent`` can be attached
to the new id.  An item whose parent was not created (missing, skipped or
listed later in the file) is created at the top level.

Failures are local: an unresolvable page or term, an unsupported item type
or a failed API call skips that one item, and a menu that can be neither
found nor created is skipped as a whole.  Only an empty file aborts the
import.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from wp_menu_migrator.clients.base import MenuStore, MenuStoreError
from wp_menu_migrator.models.menu_export import MenuRecord, load_menu_records
from wp_menu_migrator.resolvers.item_resolver import build_item_defaults, resolve_item_fields
from wp_menu_migrator.utils.errors import (
    MenuMigrationError,
    UnsupportedItemTypeError,
    log_message,
    report_error,
    report_ok,
)

PARENT_RESOLUTIONS = ("single_pass", "two_pass")


class SlugIdMap:
    """Source item slug -> id of the item created for it, for one menu."""

    def __init__(self) -> None:
        self._ids: Dict[str, int] = {}

    def record(self, slug: str, item_id: int) -> None:
        self._ids[slug] = item_id

    def parent_id_for(self, slug: Optional[str]) -> int:
        if slug is None:
            return 0
        return self._ids.get(slug, 0)

    def __contains__(self, slug: object) -> bool:
        return slug in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def as_dict(self) -> Dict[str, int]:
        return dict(self._ids)


@dataclass
class MenuImportResult:
    name: Optional[str]
    slug: Optional[str]
    menu_id: Optional[int] = None
    status: str = "imported"
    reason: Optional[str] = None
    created: int = 0
    skipped_items: List[str] = field(default_factory=list)
    id_map: Dict[str, int] = field(default_factory=dict)

    @property
    def imported(self) -> bool:
        return self.status == "imported"


@dataclass
class ImportContext:
    """Per-call settings and caches shared by every menu of one import."""

    store: MenuStore
    home_url: str
    locations: Dict[str, int]
    overwrite: bool = False
    term_lookup: str = "name"
    parent_resolution: str = "single_pass"
    log: Callable[..., None] = log_message


def _locate_menu(menu: MenuRecord, ctx: ImportContext) -> Optional[int]:
    store = ctx.store
    location = menu.bound_location
    if location and ctx.locations.get(location):
        bound = store.resolve_menu(ctx.locations[location])
        if bound is not None:
            return bound.id

    if menu.name:
        existing = store.resolve_menu(menu.name)
        if existing is not None:
            return existing.id
        return store.create_menu(menu.name)
    return None


def _delete_existing(menu: MenuRecord, ctx: ImportContext) -> None:
    if not menu.slug:
        return
    record = {"menu": menu.slug, "slug": menu.slug, "name": menu.name}
    try:
        deleted = ctx.store.delete_menu(menu.slug)
    except MenuStoreError as e:
        ctx.log(f"Could not delete existing menu '{menu.slug}': {e}", "WARNING")
        report_error("MENU_DELETE_FAILED", record, e)
        return
    if deleted:
        ctx.log(f"Deleted existing menu '{menu.slug}' before overwrite.")
    else:
        ctx.log(f"No existing menu '{menu.slug}' was deleted.", "DEBUG")


def _create_item(menu_id: int, fields: Dict[str, Any], ctx: ImportContext) -> int:
    item_id = ctx.store.create_or_update_item(menu_id, 0, fields)
    # Creating items outside a logged-in admin request may skip the menu
    # term assignment, so set it explicitly.
    ctx.store.associate_item_with_menu(item_id, menu_id)
    return item_id


def _import_items(menu: MenuRecord, menu_id: int, result: MenuImportResult, ctx: ImportContext) -> SlugIdMap:
    id_map = SlugIdMap()
    pending_parents: List[tuple] = []
    two_pass = ctx.parent_resolution == "two_pass"

    for position, item in enumerate(menu.items, start=1):
        if item is None:
            ctx.log(f'Menu item #{position} of "{menu.name}" is not a valid menu item record; skipping it.', "WARNING")
            report_error("ITEM_INVALID", {"menu": menu.slug, "slug": f"#{position}"})
            result.skipped_items.append(f"#{position}")
            continue
        record = {"menu": menu.slug, "slug": item.slug, "title": item.title}
        defaults = build_item_defaults(item)
        try:
            resolved = resolve_item_fields(item, defaults, ctx.store, home_url=ctx.home_url, term_lookup=ctx.term_lookup)
        except UnsupportedItemTypeError as e:
            ctx.log(f'The menu item "{item.title}" has an unsupported type "{e.item_type}".', "WARNING")
            report_error("ITEM_UNSUPPORTED_TYPE", record, e)
            result.skipped_items.append(item.slug)
            continue
        except MenuStoreError as e:
            ctx.log(f'Lookup failed for menu item "{item.title}": {e}', "ERROR")
            report_error("ITEM_UNRESOLVED", record, e)
            result.skipped_items.append(item.slug)
            continue

        if not resolved:
            ctx.log(f'The submenu item "{item.title}" does not have any data.', "WARNING")
            report_error("ITEM_UNRESOLVED", record)
            result.skipped_items.append(item.slug)
            continue

        fields = {**defaults, **resolved}
        fields["menu_order"] = len(id_map) + 1
        if item.parent is not None:
            if two_pass:
                fields["parent"] = 0
            else:
                fields["parent"] = id_map.parent_id_for(item.parent)
                if not fields["parent"]:
                    ctx.log(f'Parent "{item.parent}" of "{item.title}" was not created; adding it at the top level.', "WARNING")

        try:
            item_id = _create_item(menu_id, fields, ctx)
        except MenuStoreError as e:
            ctx.log(f'Failed to create menu item "{item.title}": {e}', "ERROR")
            report_error("ITEM_CREATE_FAILED", record, e)
            result.skipped_items.append(item.slug)
            continue

        id_map.record(item.slug, item_id)
        result.created += 1
        report_ok("ITEM_CREATED", record, {"item_id": item_id})
        if two_pass and item.parent is not None:
            pending_parents.append((item, item_id, fields))

    for item, item_id, fields in pending_parents:
        parent_id = id_map.parent_id_for(item.parent)
        if not parent_id:
            ctx.log(f'Parent "{item.parent}" of "{item.title}" was not created; keeping it at the top level.', "WARNING")
            continue
        try:
            ctx.store.create_or_update_item(menu_id, item_id, {**fields, "parent": parent_id})
        except MenuStoreError as e:
            ctx.log(f'Failed to re-parent menu item "{item.title}": {e}', "ERROR")
            report_error("ITEM_CREATE_FAILED", {"menu": menu.slug, "slug": item.slug, "title": item.title}, e)

    return id_map


def _bind_location(menu: MenuRecord, menu_id: int, ctx: ImportContext) -> None:
    location = menu.bound_location
    if not location:
        return
    if location not in ctx.locations:
        ctx.log(f"Theme location '{location}' is not registered on this site; menu left unassigned.", "WARNING")
        report_error("LOCATION_UNKNOWN", {"menu": menu.slug, "slug": menu.slug, "name": menu.name})
        return
    ctx.store.set_location_binding(location, menu_id)
    ctx.locations[location] = menu_id
    ctx.log(f"Assigned menu '{menu.name}' to location '{location}'.")


def import_menu(menu: MenuRecord, ctx: ImportContext) -> MenuImportResult:
    """Rebuild one menu and return what happened to it."""
    result = MenuImportResult(name=menu.name, slug=menu.slug)
    record = {"menu": menu.slug, "slug": menu.slug, "name": menu.name}

    if ctx.overwrite:
        _delete_existing(menu, ctx)

    try:
        menu_id = _locate_menu(menu, ctx)
    except MenuStoreError as e:
        ctx.log(f'Could not find or create menu "{menu.name}": {e}', "ERROR")
        report_error("MENU_NOT_FOUND", record, e)
        result.status, result.reason = "skipped", "menu-not-resolved"
        return result

    if menu_id is None:
        ctx.log(f'Something went wrong with "{menu.name}" menu.', "WARNING")
        report_error("MENU_SKIPPED", record)
        result.status, result.reason = "skipped", "menu-not-resolved"
        return result

    result.menu_id = menu_id
    if not menu.items:
        result.reason = "no-items"
    else:
        id_map = _import_items(menu, menu_id, result, ctx)
        result.id_map = id_map.as_dict()

    try:
        _bind_location(menu, menu_id, ctx)
    except MenuStoreError as e:
        ctx.log(f"Failed to assign location '{menu.bound_location}': {e}", "ERROR")
        report_error("LOCATION_UNKNOWN", record, e)

    report_ok("MENU_IMPORTED", record, {"menu_id": menu_id, "created": result.created})
    return result


def import_menus(
    decoded: Any,
    store: MenuStore,
    *,
    overwrite: bool = False,
    home_url: Optional[str] = None,
    term_lookup: str = "name",
    parent_resolution: str = "single_pass",
    log: Callable[..., None] = log_message,
) -> List[MenuImportResult]:
    """
    Import every menu in ``decoded`` (the parsed export file).

    :param decoded: A list of menu records or a single menu record.
    :param store: Backend the menus are written to.
    :param overwrite: Delete a menu with the same slug before rebuilding it.
    :param home_url: Root relative custom URLs are resolved against.
        Defaults to the store's home URL.
    :param term_lookup: ``"name"`` or ``"id"``, how taxonomy terms are matched.
    :param parent_resolution: ``"single_pass"`` attaches children while
        walking the file; ``"two_pass"`` creates everything top-level first
        and re-parents afterwards, so children listed before their parent
        keep their place in the tree.
    :return: One result per menu record, in file order.
    :raises MenuMigrationError: ``no-menus`` when the file is empty.
    """
    if parent_resolution not in PARENT_RESOLUTIONS:
        raise MenuMigrationError("invalid-config", f"Unknown parent resolution '{parent_resolution}'.")
    records = load_menu_records(decoded)

    log("Starting import menu process...")
    ctx = ImportContext(
        store=store,
        home_url=home_url if home_url is not None else store.home_url(),
        locations=store.get_location_bindings(),
        overwrite=overwrite,
        term_lookup=term_lookup,
        parent_resolution=parent_resolution,
        log=log,
    )

    results: List[MenuImportResult] = []
    for index, menu in enumerate(records, start=1):
        if menu is None:
            log(f"Menu #{index} in the file is not a valid menu record; skipping it.", "WARNING")
            report_error("MENU_SKIPPED", {"slug": f"#{index}"})
            results.append(MenuImportResult(name=None, slug=None, status="skipped", reason="invalid-record"))
            continue
        results.append(import_menu(menu, ctx))
    return results
