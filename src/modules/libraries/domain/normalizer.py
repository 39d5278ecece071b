"""Turn raw library entries into canonical items."""

import copy
import time
from collections.abc import Callable, Sequence
from typing import Any

from src.modules.libraries.domain.documents import finite_number
from src.modules.libraries.domain.entities import Element, LibraryItem

DEFAULT_ITEM_STATUS = "unpublished"


# ----------------------------------------------------------------------------
# Entry shapes, tried in order. Each returns the raw element list or None.
# ----------------------------------------------------------------------------


def _record_with_elements(entry: Any) -> list[Any] | None:
    if isinstance(entry, dict) and isinstance(entry.get("elements"), list):
        return entry["elements"]
    return None


def _record_with_data_elements(entry: Any) -> list[Any] | None:
    if not isinstance(entry, dict):
        return None
    data = entry.get("data")
    if isinstance(data, dict) and isinstance(data.get("elements"), list):
        return data["elements"]
    return None


def _nested_sequence(entry: Any) -> list[Any] | None:
    # Legacy v1 libraries: each entry is the element list itself.
    return entry if isinstance(entry, list) else None


ENTRY_SHAPES: tuple[Callable[[Any], list[Any] | None], ...] = (
    _record_with_elements,
    _record_with_data_elements,
    _nested_sequence,
)


def extract_elements(entry: Any) -> list[Element]:
    """Return deep copies of the record-shaped elements of one entry."""
    for shape in ENTRY_SHAPES:
        raw_elements = shape(entry)
        if raw_elements is not None:
            return [copy.deepcopy(e) for e in raw_elements if isinstance(e, dict)]
    return []


def is_element_record(value: Any) -> bool:
    """Whether a record looks like a bare geometry element."""
    if not isinstance(value, dict) or "elements" in value:
        return False
    element_type = value.get("type")
    return isinstance(element_type, str) and bool(element_type.strip())


def normalize_entries(
    entries: Sequence[Any], now_ms: int | None = None
) -> list[LibraryItem]:
    """Normalize a candidate array into library items.

    Entries without extractable elements are dropped. When no entry yields an
    item but the array itself is made of element records, one item wrapping
    all of them is synthesized.
    """
    base_ms = int(time.time() * 1000) if now_ms is None else now_ms

    items: list[LibraryItem] = []
    for entry in entries:
        elements = extract_elements(entry)
        if not elements:
            continue
        items.append(_build_item(entry, elements, len(items) + 1, base_ms))

    if items:
        return items

    bare_elements = [e for e in entries if is_element_record(e)]
    if not bare_elements:
        return []
    return [_build_item(list(bare_elements), copy.deepcopy(bare_elements), 1, base_ms)]


def _build_item(
    entry: Any, elements: list[Element], position: int, base_ms: int
) -> LibraryItem:
    record = entry if isinstance(entry, dict) else {}
    return LibraryItem(
        id=_text(record.get("id")) or f"item-{position}",
        name=_text(record.get("name")) or f"Figura {position}",
        elements=elements,
        raw=entry,
        status=_text(record.get("status")) or DEFAULT_ITEM_STATUS,
        created=_created(record.get("created"), base_ms + position),
    )


def _text(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _created(value: Any, fallback: int) -> int:
    if finite_number(value) is None:
        return fallback
    return int(value)
