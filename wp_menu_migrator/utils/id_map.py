"""
Generation of item id mapping CSV files.

The :func:`generate_id_map_csv` helper writes a CSV file containing the
mapping of source menu item slugs to the ids created on the target site.
The resulting file can be used to audit an import or to patch content that
links to menu items by id.
"""

from __future__ import annotations

import csv
import os
from typing import Iterable


def generate_id_map_csv(results: Iterable, *, out_path: str = "reports/menu_id_map.csv") -> str:
    """Generate a CSV mapping source item slugs to new item ids.

    Parameters
    ----------
    results:
        Iterable of :class:`~wp_menu_migrator.importers.menu_importer.MenuImportResult`.
        Skipped menus contribute no rows.
    out_path:
        Location of the CSV file to be written.  The parent directory is
        created automatically.

    Returns
    -------
    str
        The path of the generated CSV file.
    """
    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    with open(out_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["Menu", "SourceSlug", "NewItemId"])
        for result in results:
            menu = result.slug or result.name or ""
            for slug, item_id in result.id_map.items():
                writer.writerow([menu, slug, item_id])
    return out_path
