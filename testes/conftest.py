import itertools
import os
import sys

# Ensure project root is on sys.path for imports when running tests directly
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest

from wp_menu_migrator.clients.base import ContentObject, MenuStoreError, NavMenu, NavMenuItem, Term
from wp_menu_migrator.models.menu_export import _slugify
from wp_menu_migrator.utils import errors


class FakeMenuStore:
    """In-memory stand-in for a WordPress site."""

    def __init__(self, home="https://target.test", locations=("primary", "footer"), id_start=100):
        self.home = home
        self.locations = {key: 0 for key in locations}
        self.menus = {}
        self.items = {}
        self.content = []
        self.terms = []
        self.associations = []
        self.deleted = []
        self.fail_titles = set()
        self.fail_delete = False
        self._ids = itertools.count(id_start)

    # seeding helpers

    def add_page(self, name, title, type_="page", status="publish"):
        obj = ContentObject(id=next(self._ids), name=name, title=title, type=type_)
        self.content.append((obj, status))
        return obj

    def add_term(self, taxonomy, name):
        term = Term(id=next(self._ids), name=name, taxonomy=taxonomy)
        self.terms.append(term)
        return term

    def add_item(self, menu_id, **fields):
        fields.setdefault("menu_order", len(self.items_for(menu_id)) + 1)
        return self.create_or_update_item(menu_id, 0, fields)

    def items_for(self, menu_id):
        return [i for i in self.items.values() if i["menu_id"] == menu_id]

    def menu_by_name(self, name):
        return [m for m in self.menus.values() if m.name == name]

    # MenuStore

    def home_url(self):
        return self.home

    def get_location_bindings(self):
        return dict(self.locations)

    def get_menus(self):
        return list(self.menus.values())

    def resolve_menu(self, identifier):
        if isinstance(identifier, int) or str(identifier).isdigit():
            menu = self.menus.get(int(identifier))
            if menu:
                return menu
        for menu in self.menus.values():
            if menu.slug == str(identifier):
                return menu
        for menu in self.menus.values():
            if menu.name == str(identifier):
                return menu
        return None

    def create_menu(self, name):
        menu = NavMenu(id=next(self._ids), name=name, slug=_slugify(name))
        self.menus[menu.id] = menu
        return menu.id

    def delete_menu(self, identifier):
        if self.fail_delete:
            raise MenuStoreError("delete refused")
        menu = self.resolve_menu(identifier)
        if menu is None:
            return False
        del self.menus[menu.id]
        for item_id in [i for i, data in self.items.items() if data["menu_id"] == menu.id]:
            del self.items[item_id]
        for key, bound in self.locations.items():
            if bound == menu.id:
                self.locations[key] = 0
        self.deleted.append(menu.slug)
        return True

    def get_items(self, menu):
        items = []
        for item_id, data in self.items.items():
            if data["menu_id"] != menu.id:
                continue
            f = data["fields"]
            items.append(NavMenuItem(
                id=item_id,
                title=f.get("title") or "",
                type=f.get("type", ""),
                object=f.get("object", ""),
                object_id=f.get("object_id", 0),
                parent=f.get("parent", 0),
                url=f.get("url", ""),
                menu_order=f.get("menu_order", 0),
                target=f.get("target", ""),
                attr_title=f.get("attr_title", ""),
                description=f.get("description", ""),
                classes=(f.get("classes") or "").split() if isinstance(f.get("classes"), str) else list(f.get("classes") or []),
                xfn=f.get("xfn", ""),
            ))
        return sorted(items, key=lambda i: i.menu_order)

    def create_or_update_item(self, menu_id, item_id, fields):
        if fields.get("title") in self.fail_titles:
            raise MenuStoreError(f"cannot create {fields.get('title')}")
        if item_id:
            self.items[item_id]["fields"] = dict(fields)
            return item_id
        new_id = next(self._ids)
        self.items[new_id] = {"menu_id": menu_id, "fields": dict(fields)}
        return new_id

    def associate_item_with_menu(self, item_id, menu_id):
        self.associations.append((item_id, menu_id))

    def set_location_binding(self, location, menu_id):
        self.locations[location] = menu_id

    def find_content_object(self, name, type_key=None):
        for obj, status in self.content:
            if obj.name == name and status == "publish" and (type_key is None or obj.type == type_key):
                return obj
        return None

    def find_term(self, taxonomy, value, by="name"):
        for term in self.terms:
            if term.taxonomy != taxonomy:
                continue
            if by == "name" and term.name == str(value):
                return term
            if by == "id" and str(term.id) == str(value):
                return term
        return None

    def get_content_object(self, object_id, type_key):
        for obj, _ in self.content:
            if obj.id == object_id:
                return obj
        return None

    def get_term(self, term_id, taxonomy):
        for term in self.terms:
            if term.id == term_id and term.taxonomy == taxonomy:
                return term
        return None


@pytest.fixture(autouse=True)
def isolated_reports(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    errors.set_report_dir(str(tmp_path / "reports" / "migration"))
    yield
    errors.set_report_dir(os.path.join("reports", "migration"))


@pytest.fixture
def store():
    return FakeMenuStore()


@pytest.fixture
def silent_log():
    lines = []

    def log(message, level="INFO"):
        lines.append((level, message))

    log.lines = lines
    return log


@pytest.fixture
def make_store():
    return FakeMenuStore
