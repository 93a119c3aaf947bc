"""
Typed field-level diffs for pending page changes.

A PageDiff only ever carries columns of the pages table. Everything else a
client posts is dropped on the way in, so publish-time comparisons work on
like-for-like values.
"""
from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date, datetime
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple, Union

from dateutil.parser import parse


class _Missing:
    """Marker for a field the diff does not touch."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "MISSING"


MISSING = _Missing()

# Checkbox-style flags: absent from a submission means "off"
CHECKBOX_FIELDS = ("trunk", "in_nav", "seo_invisible")
FLAG_FIELDS = CHECKBOX_FIELDS + ("new_window",)
DATE_FIELDS = ("publish_at", "expire_at")


@dataclass
class PageDiff:
    trunk: Union[bool, _Missing] = MISSING
    parent: Union[int, _Missing] = MISSING
    in_nav: Union[bool, _Missing] = MISSING
    nav_title: Union[str, _Missing] = MISSING
    title: Union[str, _Missing] = MISSING
    route: Union[str, _Missing] = MISSING
    meta_description: Union[str, _Missing] = MISSING
    seo_invisible: Union[bool, _Missing] = MISSING
    template: Union[str, _Missing] = MISSING
    external: Union[str, _Missing] = MISSING
    new_window: Union[bool, _Missing] = MISSING
    content: Union[Dict[str, Any], _Missing] = MISSING
    publish_at: Union[str, None, _Missing] = MISSING
    expire_at: Union[str, None, _Missing] = MISSING
    max_age: Union[int, _Missing] = MISSING

    @classmethod
    def from_mapping(cls, changes: Optional[Mapping[str, Any]]) -> "PageDiff":
        """Build a diff from stored (already normalized) changes."""
        changes = changes or {}
        return cls(**{
            name: changes[name] for name in DIFFABLE_FIELDS if name in changes
        })

    def items(self) -> Iterator[Tuple[str, Any]]:
        for name in DIFFABLE_FIELDS:
            value = getattr(self, name)
            if value is not MISSING:
                yield name, value

    def as_dict(self) -> Dict[str, Any]:
        return dict(self.items())

    def __bool__(self):
        return any(True for _ in self.items())

    def against(self, row: Mapping[str, Any]) -> "PageDiff":
        """Keep only the fields whose value differs from ``row``."""
        return PageDiff(**{
            name: value for name, value in self.items()
            if name in row and row[name] != value
        })

    def matches(self, row: Mapping[str, Any]) -> bool:
        """
        True when every diffed field equals the value in ``row``.

        An empty route in the diff means "generate one" and is not compared.
        An empty diff never matches: there is no drafted work to attribute.
        """
        if not self:
            return False

        for name, value in self.items():
            if name == "route" and not value:
                continue
            if row.get(name) != value:
                return False
        return True


DIFFABLE_FIELDS = tuple(f.name for f in fields(PageDiff))


def to_iso_date(value: Any) -> Optional[str]:
    if value in (None, "", "NULL", False):
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return parse(str(value)).date().isoformat()


def normalize_changes(changes: Mapping[str, Any]) -> PageDiff:
    """
    Coerce a raw submission into storage encoding.

    Unknown keys are dropped. Checkbox flags are always present (absent
    means off) since an unticked box is never posted.
    """
    normalized: Dict[str, Any] = {}

    for name in DIFFABLE_FIELDS:
        if name not in changes and name not in CHECKBOX_FIELDS:
            continue

        value = changes.get(name)

        if name in FLAG_FIELDS:
            value = _truthy(value)
        elif name in DATE_FIELDS:
            value = to_iso_date(value)
        elif name in ("parent", "max_age"):
            value = int(value or 0)
        elif name == "content":
            value = dict(value or {})
        else:
            value = "" if value is None else str(value)

        normalized[name] = value

    return PageDiff(**normalized)


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("on", "1", "true", "yes")
    if isinstance(value, Mapping):
        # {"seo_invisible": "on"} style nested checkbox posts
        return any(_truthy(v) for v in value.values())
    return bool(value)


def to_date(value: Any) -> Optional[date]:
    iso = to_iso_date(value)
    return date.fromisoformat(iso) if iso else None
