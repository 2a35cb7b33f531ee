import csv
import json
import os
import sys

# Ensure project root is on sys.path for imports when running tests directly
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest

from wp_menu_migrator.importers.menu_importer import MenuImportResult
from wp_menu_migrator.migration_tool import MenuMigrationTool
from wp_menu_migrator.utils.errors import MenuMigrationError
from wp_menu_migrator.utils.id_map import generate_id_map_csv


@pytest.fixture(autouse=True)
def no_env_credentials(monkeypatch):
    for name in ("WP_BASE_URL", "WP_USERNAME", "WP_APP_PASSWORD"):
        monkeypatch.delenv(name, raising=False)


def seeded_store(make_store):
    store = make_store(home="https://source.test")
    menu_id = store.create_menu("Main")
    store.add_item(menu_id, title="Home", type="custom", url="https://source.test/")
    store.set_location_binding("primary", menu_id)
    return store


def write_json(path, data):
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f)
    return str(path)


def test_config_defaults(store):
    tool = MenuMigrationTool(config={}, store=store)
    assert tool.config["wordpress"]["base_url"] == ""
    assert tool.config["wordpress"]["rpm"] == 180
    assert tool.config["migration"] == {
        "dry_run": False,
        "overwrite": False,
        "term_lookup": "name",
        "parent_resolution": "single_pass",
        "export_dir": ".",
        "reports_dir": os.path.join("reports", "migration"),
    }


def test_credentials_fall_back_to_environment(monkeypatch, store):
    monkeypatch.setenv("WP_BASE_URL", "https://env.test")
    monkeypatch.setenv("WP_APP_PASSWORD", "xxxx yyyy")
    tool = MenuMigrationTool(config={}, store=store)
    assert tool.config["wordpress"]["base_url"] == "https://env.test"
    assert tool.config["wordpress"]["application_password"] == "xxxx yyyy"


def test_config_file_is_read(tmp_path, store):
    path = write_json(tmp_path / "config.json", {"migration": {"overwrite": True, "term_lookup": "id"}})
    tool = MenuMigrationTool(config_file=path, store=store)
    assert tool.config["migration"]["overwrite"] is True
    assert tool.config["migration"]["term_lookup"] == "id"


@pytest.mark.parametrize("migration", [{"term_lookup": "slug"}, {"parent_resolution": "topological"}])
def test_invalid_settings_are_rejected(store, migration):
    with pytest.raises(MenuMigrationError) as exc:
        MenuMigrationTool(config={"migration": migration}, store=store)
    assert exc.value.code == "invalid-config"


def test_export_writes_named_file(make_store, tmp_path):
    tool = MenuMigrationTool(config={}, store=seeded_store(make_store))
    path = tool.export(["Main"], filename=str(tmp_path / "menus.json"))
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    assert data[0]["name"] == "Main"
    assert data[0]["location"] == "primary"
    assert data[0]["items"][0]["url"] == "https://source.test/"


def test_export_default_filename_uses_site_host(make_store, tmp_path):
    tool = MenuMigrationTool(config={"migration": {"export_dir": str(tmp_path)}}, store=seeded_store(make_store))
    path = tool.export(export_all=True)
    assert os.path.dirname(path) == str(tmp_path)
    assert os.path.basename(path).startswith("source.test-exported-menu-")
    assert os.path.exists(path)


@pytest.mark.parametrize("menus, export_all, filename, code", [
    ([], False, None, "menu-not-specified"),
    (["Main"], True, None, "wrong-params-usage"),
    (["Main"], False, True, "filename-empty"),
    (["Main"], False, "  ", "filename-empty"),
])
def test_export_option_errors_write_nothing(make_store, tmp_path, menus, export_all, filename, code):
    tool = MenuMigrationTool(config={"migration": {"export_dir": str(tmp_path)}}, store=seeded_store(make_store))
    with pytest.raises(MenuMigrationError) as exc:
        tool.export(menus, export_all=export_all, filename=filename)
    assert exc.value.code == code
    assert not [name for name in os.listdir(tmp_path) if name.endswith(".json")]


def test_export_of_unknown_menu_reports_no_menus(make_store):
    tool = MenuMigrationTool(config={}, store=seeded_store(make_store))
    with pytest.raises(MenuMigrationError) as exc:
        tool.export(["Sidebar"])
    assert exc.value.code == "no-menus"


def test_import_missing_file(store):
    tool = MenuMigrationTool(config={}, store=store)
    with pytest.raises(MenuMigrationError) as exc:
        tool.import_file("nope.json")
    assert exc.value.code == "file-not-found"


def test_import_invalid_json(store, tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("[{", encoding="utf-8")
    tool = MenuMigrationTool(config={}, store=store)
    with pytest.raises(MenuMigrationError) as exc:
        tool.import_file(str(path))
    assert exc.value.code == "invalid-json"


def test_export_then_import_file_writes_id_map(make_store, tmp_path):
    exported = MenuMigrationTool(config={}, store=seeded_store(make_store)).export(
        ["Main"], filename=str(tmp_path / "menus.json"))
    target = make_store()
    results = MenuMigrationTool(config={}, store=target).import_file(exported)

    assert results[0].imported
    assert target.locations["primary"] == results[0].menu_id
    with open(os.path.join("reports", "menu_id_map.csv"), encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows[0] == ["Menu", "SourceSlug", "NewItemId"]
    assert rows[1][0] == "main"
    assert rows[1][2] == str(results[0].id_map[rows[1][1]])


def test_dry_run_from_config_writes_nothing(make_store, tmp_path):
    exported = MenuMigrationTool(config={}, store=seeded_store(make_store)).export(
        ["Main"], filename=str(tmp_path / "menus.json"))
    target = make_store()
    results = MenuMigrationTool(config={"migration": {"dry_run": True}}, store=target).import_file(exported)
    assert results[0].menu_id < 0
    assert target.menus == {}
    assert not os.path.exists(os.path.join("reports", "menu_id_map.csv"))


def test_explicit_arguments_override_config(make_store, tmp_path):
    path = write_json(tmp_path / "menus.json", [{"name": "Main", "items": [
        {"slug": "2", "parent": "1", "title": "Child", "type": "custom", "url": "/c"},
        {"slug": "1", "title": "Parent", "type": "custom", "url": "/p"},
    ]}])
    target = make_store()
    tool = MenuMigrationTool(config={"migration": {"dry_run": True}}, store=target)
    result = tool.import_file(path, dry_run=False, parent_resolution="two_pass")[0]
    items = {i.title: i for i in target.get_items(target.resolve_menu(result.menu_id))}
    assert items["Child"].parent == items["Parent"].id


def test_run_log_is_written(store, tmp_path):
    MenuMigrationTool(config={"migration": {"reports_dir": str(tmp_path / "out")}}, store=store).log_message("hello")
    with open(tmp_path / "out" / "migration.log", encoding="utf-8") as f:
        assert "INFO: hello" in f.read()


def test_id_map_csv_skips_menus_without_items(tmp_path):
    results = [
        MenuImportResult(name="Main", slug="main", menu_id=5, id_map={"1": 50, "2": 51}),
        MenuImportResult(name=None, slug=None, status="skipped", reason="invalid-record"),
    ]
    path = generate_id_map_csv(results, out_path=str(tmp_path / "maps" / "ids.csv"))
    with open(path, encoding="utf-8") as f:
        assert list(csv.reader(f)) == [["Menu", "SourceSlug", "NewItemId"], ["main", "1", "50"], ["main", "2", "51"]]
