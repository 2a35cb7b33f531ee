"""
Structured logging helpers for menu migration errors and successes.

The :mod:`wp_menu_migrator.utils.errors` module centralizes the writing of
log entries for both failed and successful operations during an export or
import.  Each entry is appended to a JSON Lines file under
``reports/migration`` so that the information can be reviewed or parsed
after a run.

Public helpers:

``log_message``
    Print a ``[LEVEL] message`` line and append it to the plain text run log.

``report_error``
    Record an error that occurred for a menu or menu item.  An optional
    exception can be supplied and will be serialized to the log.

``report_ok``
    Record a successful step for a menu or menu item.  Additional key/value
    information can be attached to the entry via the ``extra`` parameter.

The ``ERRORS`` dictionary maps error or event codes to human readable
messages.  Codes not present in the dictionary fall back to the code itself.
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional

# Mapping of event codes used throughout the migration to descriptive messages.
# Lowercase, dashed codes are the ones carried by MenuMigrationError; upper
# case codes are report events.
ERRORS: Dict[str, str] = {
    "menu-not-specified": "You must specify a menu or use --all flag.",
    "wrong-params-usage": "You can't export all menus when specifying single menus.",
    "filename-empty": "The filename flag is empty.",
    "no-menus": "There are no menus to export.",
    "file-not-found": "File to import doesn't exist.",
    "invalid-json": "The file to import is not valid JSON.",
    "unsupported-type": "Unsupported menu item type.",
    "invalid-config": "Invalid migration configuration.",
    "MENU_NOT_FOUND": "Menu could not be resolved",
    "MENU_SKIPPED": "Menu was skipped",
    "MENU_DELETE_FAILED": "Existing menu could not be deleted before overwrite",
    "ITEM_INVALID": "Menu item record is malformed",
    "ITEM_UNRESOLVED": "Menu item target not found on this site",
    "ITEM_UNSUPPORTED_TYPE": "Menu item type is not supported",
    "ITEM_CREATE_FAILED": "Menu item could not be created",
    "LOCATION_UNKNOWN": "Theme location is not registered on this site",
    "MENU_EXPORTED": "Menu exported successfully",
    "MENU_IMPORTED": "Menu imported successfully",
    "ITEM_CREATED": "Menu item created successfully",
}

_REPORT_DIR = os.path.join("reports", "migration")
_ERROR_LOG = "errors.jsonl"
_OK_LOG = "success.jsonl"
_RUN_LOG = "migration.log"


class MenuMigrationError(Exception):
    """Hard failure of an export or import, identified by ``code``."""

    def __init__(self, code: str, message: Optional[str] = None) -> None:
        self.code = code
        self.message = message or ERRORS.get(code, code)
        super().__init__(self.message)


class UnsupportedItemTypeError(MenuMigrationError):
    """Raised when a menu item carries a ``type`` that has no resolver."""

    def __init__(self, item_type: Any) -> None:
        self.item_type = item_type
        super().__init__("unsupported-type", f"Unsupported menu item type '{item_type}'.")


def set_report_dir(path: str) -> None:
    """Redirect every report and log file written by this module to ``path``."""
    global _REPORT_DIR
    _REPORT_DIR = path


def _write_jsonl(name: str, data: Dict[str, Any]) -> None:
    """Append ``data`` as a JSON object followed by a newline to ``name``."""
    os.makedirs(_REPORT_DIR, exist_ok=True)
    with open(os.path.join(_REPORT_DIR, name), "a", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False)
        f.write("\n")


def log_message(message: str, level: str = "INFO") -> None:
    print(f"[{level}] {message}")
    os.makedirs(_REPORT_DIR, exist_ok=True)
    with open(os.path.join(_REPORT_DIR, _RUN_LOG), "a", encoding="utf-8") as f:
        f.write(f"{level}: {message}\n")


def _entry(code: str, record: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "code": code,
        "message": ERRORS.get(code, code),
        "menu": record.get("menu"),
        "slug": record.get("slug"),
        "title": record.get("title") or record.get("name"),
    }


def report_error(code: str, record: Dict[str, Any], exc: Optional[Exception] = None) -> None:
    """Log an error event for ``record``.

    Parameters
    ----------
    code:
        A key identifying the type of error.  If ``code`` is present in
        :data:`ERRORS` its value will be used as the message.
    record:
        The menu or menu item dictionary associated with the error.  Only the
        ``menu``, ``slug``, ``title`` and ``name`` keys are referenced.
    exc:
        Optional exception instance that triggered the error.  The string
        representation of the exception will be included in the log entry.
    """
    entry = _entry(code, record)
    if exc is not None:
        entry["error"] = str(exc)
    print(f"[ERROR] {entry['message']} - {record.get('slug', '')}")
    _write_jsonl(_ERROR_LOG, entry)


def report_ok(code: str, record: Dict[str, Any], extra: Optional[Dict[str, Any]] = None) -> None:
    """Log a successful event for ``record``.

    Parameters
    ----------
    code:
        A key identifying the type of event.
    record:
        The menu or menu item dictionary associated with the event.
    extra:
        Optional dictionary of additional fields to merge into the log entry.
    """
    entry = _entry(code, record)
    if extra:
        entry.update(extra)
    print(f"[OK] {entry['message']} - {record.get('slug', '')}")
    _write_jsonl(_OK_LOG, entry)
