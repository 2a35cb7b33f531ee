"""
Resolution of exported menu items against a target site.

An exported item references its target by natural key (a page slug, a term
name) because numeric ids are not portable between sites.  The functions
in this module turn one :class:`~wp_menu_migrator.models.MenuItemRecord`
into the field payload expected by
:meth:`~wp_menu_migrator.clients.base.MenuStore.create_or_update_item`.

Each supported item ``type`` has exactly one resolver in
:data:`ITEM_RESOLVERS`.  A resolver returns an empty dict when the target
object does not exist on this site; the caller skips such items and never
fabricates a replacement.  A ``type`` without a resolver raises
:class:`~wp_menu_migrator.utils.errors.UnsupportedItemTypeError`.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Dict

from requests.utils import requote_uri

from wp_menu_migrator.clients.base import MenuStore
from wp_menu_migrator.models.menu_export import MenuItemRecord
from wp_menu_migrator.utils.errors import MenuMigrationError, UnsupportedItemTypeError

TERM_LOOKUPS = ("name", "id")

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")


def build_item_defaults(item: MenuItemRecord) -> Dict[str, Any]:
    return {
        "title": item.title or False,
        "status": "publish",
    }


def absolute_url(url: str, home_url: str) -> str:
    """Keep URLs that carry a scheme, resolve everything else against the site root."""
    url = url.strip()
    if _SCHEME_RE.match(url):
        return requote_uri(url)
    return f"{home_url.rstrip('/')}/{url.lstrip('/')}"


def _resolve_custom(item: MenuItemRecord, defaults: Dict[str, Any], store: MenuStore, **context: Any) -> Dict[str, Any]:
    if not item.url:
        return {}
    return {
        "type": "custom",
        "url": absolute_url(item.url, context["home_url"]),
        "title": defaults["title"] or item.url,
    }


def _resolve_post_type(item: MenuItemRecord, defaults: Dict[str, Any], store: MenuStore, **context: Any) -> Dict[str, Any]:
    if not item.page:
        return {}
    found = store.find_content_object(item.page, item.post_type or None)
    if found is None:
        return {}
    return {
        "type": "post_type",
        "object": found.type,
        "object_id": found.id,
        "title": defaults["title"] or found.title,
    }


def _resolve_taxonomy(item: MenuItemRecord, defaults: Dict[str, Any], store: MenuStore, **context: Any) -> Dict[str, Any]:
    if not item.taxonomy or item.term is None or item.term == "":
        return {}
    term = store.find_term(item.taxonomy, item.term, by=context["term_lookup"])
    if term is None:
        return {}
    return {
        "type": "taxonomy",
        "object": term.taxonomy or item.taxonomy,
        "object_id": term.id,
        "title": defaults["title"] or term.name,
    }


ITEM_RESOLVERS: Dict[str, Callable[..., Dict[str, Any]]] = {
    "custom": _resolve_custom,
    "post_type": _resolve_post_type,
    "taxonomy": _resolve_taxonomy,
}


def resolve_item_fields(
    item: MenuItemRecord,
    defaults: Dict[str, Any],
    store: MenuStore,
    *,
    home_url: str,
    term_lookup: str = "name",
) -> Dict[str, Any]:
    """
    Build the creation fields for ``item`` on the target site.

    :param item: The exported menu item.
    :param defaults: Output of :func:`build_item_defaults`; its title wins
        over the target object's natural title.
    :param store: Backend used to look up pages and terms.
    :param home_url: Site root that relative custom URLs are joined onto.
    :param term_lookup: ``"name"`` or ``"id"``, how ``term`` is matched.
    :return: The resolved fields, or ``{}`` when the target does not exist.
    :raises UnsupportedItemTypeError: if ``item.type`` has no resolver.
    """
    if term_lookup not in TERM_LOOKUPS:
        raise MenuMigrationError("invalid-config", f"Unknown term lookup '{term_lookup}'.")
    resolver = ITEM_RESOLVERS.get(item.type)
    if resolver is None:
        raise UnsupportedItemTypeError(item.type)

    fields = resolver(item, defaults, store, home_url=home_url, term_lookup=term_lookup)
    if not fields:
        return {}

    advanced = item.advanced_fields()
    if "classes" in advanced:
        advanced["classes"] = " ".join(advanced["classes"])
    fields.update(advanced)
    return fields
