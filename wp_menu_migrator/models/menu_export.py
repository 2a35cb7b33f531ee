from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from wp_menu_migrator.utils.errors import MenuMigrationError

ADVANCED_FIELDS = ("target", "attr_title", "description", "classes", "xfn")


def _slugify(value: str) -> str:
    text = value.strip().lower()
    out = []
    prev_dash = False
    for ch in text:
        if ch.isalnum():
            out.append(ch)
            prev_dash = False
        else:
            if not prev_dash:
                out.append("-")
            prev_dash = True
    slug = "".join(out).strip("-")
    return slug[:200]


class MenuItemRecord(BaseModel):
    """One menu item as it appears in an export file."""

    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    slug: str
    parent: Optional[str] = None
    title: Optional[str] = None
    type: str = ""

    url: Optional[str] = None
    page: Optional[str] = None
    post_type: Optional[str] = None
    taxonomy: Optional[str] = None
    term: Optional[Union[int, str]] = None

    target: Optional[str] = None
    attr_title: Optional[str] = None
    description: Optional[str] = None
    classes: Optional[list[str]] = None
    xfn: Optional[str] = None

    @field_validator("slug", mode="before")
    @classmethod
    def _slug_to_str(cls, v: Any):
        if isinstance(v, bool) or v is None:
            raise ValueError("menu item slug is required")
        return str(v)

    @field_validator("parent", mode="before")
    @classmethod
    def _top_level_parent(cls, v: Any):
        # WordPress stores "no parent" as 0
        if v is None or isinstance(v, bool) or str(v).strip() in ("", "0"):
            return None
        return str(v)

    @field_validator("title", "url", "page", "post_type", "taxonomy", "target", "attr_title", "description", "xfn", mode="before")
    @classmethod
    def _scalar_to_str(cls, v: Any):
        # JSON numbers are accepted as text; false means unset
        if v is None or isinstance(v, bool):
            return None
        if isinstance(v, (int, float)):
            return str(v)
        return v

    @field_validator("type", mode="before")
    @classmethod
    def _type_to_str(cls, v: Any):
        return "" if v is None else str(v)

    @field_validator("classes", mode="before")
    @classmethod
    def _split_classes(cls, v: Any):
        if v is None:
            return None
        if isinstance(v, str):
            return v.split()
        return [str(c) for c in v if str(c).strip()]

    def advanced_fields(self) -> dict[str, Any]:
        """Return the advanced display properties present on this item."""
        return {name: getattr(self, name) for name in ADVANCED_FIELDS if getattr(self, name) is not None}


class MenuRecord(BaseModel):
    """One menu as it appears in an export file."""

    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    location: Union[bool, str] = False
    name: Optional[str] = None
    slug: Optional[str] = Field(None, validate_default=True)
    items: list[Optional[MenuItemRecord]] = Field(default_factory=list)

    @field_validator("location", mode="before")
    @classmethod
    def _location_or_false(cls, v: Any):
        if v is None or isinstance(v, bool) or not str(v).strip():
            return False
        return str(v)

    @field_validator("slug", mode="before")
    @classmethod
    def _ensure_slug(cls, v: Optional[str], info):  # type: ignore[override]
        if v is not None and str(v).strip():
            return str(v)
        name = info.data.get("name")
        if isinstance(name, str) and name.strip():
            return _slugify(name)
        return None

    @field_validator("name", mode="before")
    @classmethod
    def _name_to_str(cls, v: Any):
        if v is None or isinstance(v, bool):
            return None
        return str(v) if isinstance(v, (int, float)) else v

    @field_validator("items", mode="before")
    @classmethod
    def _validate_each_item(cls, v: Any):
        # invalid items are kept as None so the importer can skip just them
        if not isinstance(v, list):
            return []
        items: list[Optional[MenuItemRecord]] = []
        for raw in v:
            try:
                items.append(MenuItemRecord.model_validate(raw))
            except ValidationError:
                items.append(None)
        return items

    @property
    def bound_location(self) -> Optional[str]:
        return self.location if isinstance(self.location, str) else None

    def to_export_dict(self) -> dict[str, Any]:
        data = self.model_dump(exclude_none=True)
        data["location"] = self.bound_location or False
        return data


def load_menu_records(decoded: Any) -> list[Optional[MenuRecord]]:
    """
    Normalize a decoded export file into a list of menu records.

    A single menu object is treated as a one-element list.  An empty file
    raises ``MenuMigrationError("no-menus")``.  Entries that do not validate
    come back as ``None`` so the caller can skip them and carry on.
    """
    if isinstance(decoded, dict) and not decoded:
        raise MenuMigrationError("no-menus", "The file is empty.")
    menus = decoded if isinstance(decoded, list) else [decoded]
    if not menus or menus[0] is None:
        raise MenuMigrationError("no-menus", "The file is empty.")

    records: list[Optional[MenuRecord]] = []
    for raw in menus:
        try:
            records.append(MenuRecord.model_validate(raw))
        except ValidationError:
            records.append(None)
    return records
