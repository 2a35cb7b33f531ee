import json
import os
import sys
from datetime import date

# Ensure project root is on sys.path for imports when running tests directly
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest

from wp_menu_migrator.exporters.menu_exporter import (
    default_filename,
    export_menus,
    validate_filename,
    write_export,
)
from wp_menu_migrator.utils.errors import MenuMigrationError


@pytest.fixture
def site(make_store):
    site = make_store(home="https://source.test", id_start=1)
    about = site.add_page("about", "About")
    news = site.add_term("category", "News")
    main = site.create_menu("Main")
    home_id = site.add_item(main, title="Home", type="custom", url="https://source.test/", parent=0)
    site.add_item(main, title="About", type="post_type", object="page", object_id=about.id, parent=home_id,
                  classes="menu-about current", target="_blank")
    site.add_item(main, title="News", type="taxonomy", object="category", object_id=news.id, parent=0)
    site.create_menu("Footer")
    site.set_location_binding("primary", main)
    return site


def test_export_single_menu_by_name(site, silent_log):
    records = export_menus(site, ["Main"], log=silent_log)
    assert len(records) == 1
    menu = records[0]
    assert menu["location"] == "primary"
    assert menu["name"] == "Main"
    assert menu["slug"] == "main"

    home, about, news = menu["items"]
    assert home == {"slug": str(site.menu_by_name("Main")[0].id + 1), "title": "Home", "type": "custom",
                    "url": "https://source.test/"}
    assert about["parent"] == home["slug"]
    assert about["page"] == "about"
    assert about["post_type"] == "page"
    assert about["classes"] == ["menu-about", "current"]
    assert about["target"] == "_blank"
    assert news["taxonomy"] == "category"
    assert news["term"] == "News"
    assert "parent" not in news


def test_export_terms_by_id(site, silent_log):
    records = export_menus(site, ["main"], term_lookup="id", log=silent_log)
    news = records[0]["items"][2]
    assert news["term"] == site.terms[0].id


def test_unbound_menu_exports_false_location(site, silent_log):
    records = export_menus(site, ["Footer"], log=silent_log)
    assert records[0]["location"] is False
    assert records[0]["items"] == []


def test_export_all(site, silent_log):
    records = export_menus(site, export_all=True, log=silent_log)
    assert [r["name"] for r in records] == ["Main", "Footer"]


def test_menu_identifiers_by_id_and_slug(site, silent_log):
    main_id = site.menu_by_name("Main")[0].id
    records = export_menus(site, [str(main_id), "footer"], log=silent_log)
    assert [r["name"] for r in records] == ["Main", "Footer"]


def test_unknown_menus_are_logged_and_skipped(site, silent_log):
    records = export_menus(site, ["Ghost", "Main"], log=silent_log)
    assert [r["name"] for r in records] == ["Main"]
    assert any("Ghost" in message for level, message in silent_log.lines if level == "WARNING")


def test_no_resolvable_menus_fails(site, silent_log):
    with pytest.raises(MenuMigrationError) as exc:
        export_menus(site, ["Ghost"], log=silent_log)
    assert exc.value.code == "no-menus"


def test_both_selection_modes_is_a_usage_error(site, silent_log):
    with pytest.raises(MenuMigrationError) as exc:
        export_menus(site, ["Main"], export_all=True, log=silent_log)
    assert exc.value.code == "wrong-params-usage"


def test_no_selection_is_a_usage_error(site, silent_log):
    with pytest.raises(MenuMigrationError) as exc:
        export_menus(site, [], log=silent_log)
    assert exc.value.code == "menu-not-specified"


@pytest.mark.parametrize("filename", ["", "   ", True, False])
def test_empty_or_flag_filename_is_rejected(filename):
    with pytest.raises(MenuMigrationError) as exc:
        validate_filename(filename)
    assert exc.value.code == "filename-empty"


def test_missing_target_is_exported_without_type_fields(site, silent_log):
    main = site.menu_by_name("Main")[0].id
    site.add_item(main, title="Gone", type="post_type", object="page", object_id=9999, parent=0)
    records = export_menus(site, ["Main"], log=silent_log)
    gone = records[0]["items"][-1]
    assert gone["type"] == "post_type"
    assert "page" not in gone


def test_default_filename():
    assert default_filename("https://www.example.com/blog", date(2024, 3, 9)) == "www.example.com-exported-menu-2024-03-09.json"


def test_write_export_to_explicit_file(tmp_path, silent_log):
    path = write_export([{"name": "Main", "location": False, "slug": "main", "items": []}],
                        str(tmp_path / "menus.json"), log=silent_log)
    with open(path, encoding="utf-8") as f:
        assert json.load(f)[0]["location"] is False


def test_write_export_default_name(tmp_path, silent_log):
    path = write_export([], home_url="https://shop.example", log=silent_log)
    assert path.startswith("shop.example-exported-menu-")
    assert (tmp_path / path).exists()
