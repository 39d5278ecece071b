"""Library domain entities."""

import copy
from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

Element = dict[str, Any]


def freeze(value: Any) -> Any:
    """Deep read-only view: records become mapping proxies, sequences tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze(item) for key, item in value.items()})
    if isinstance(value, list | tuple):
        return tuple(freeze(item) for item in value)
    return value


def thaw(value: Any) -> Any:
    """Inverse of freeze: plain dicts and lists, safe to mutate or serialize."""
    if isinstance(value, Mapping):
        return {key: thaw(item) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [thaw(item) for item in value]
    return value


class CatalogCollection(BaseModel):
    """One named, fetchable group of figures listed in the catalog."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="source + ordinal, unique within one catalog load")
    name: str = Field(..., description="Display name")
    source: str = Field(..., description="Relative or absolute library URI")
    description: str | None = Field(default=None)
    author: str | None = Field(default=None)
    preview_url: str | None = Field(default=None)

    @property
    def initial(self) -> str:
        """Placeholder letter shown when no preview is available."""
        stripped = self.name.strip()
        return stripped[:1].upper() if stripped else "?"


class LibraryItem(BaseModel):
    """One importable figure composed of one or more elements."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    id: str
    name: str
    elements: tuple[MappingProxyType, ...] = Field(..., min_length=1)
    raw: Any = Field(..., description="Original entry exactly as declared")
    status: str
    created: int

    @field_validator("elements", mode="before")
    @classmethod
    def _freeze_elements(cls, value: Any) -> tuple[MappingProxyType, ...]:
        return tuple(freeze(element) for element in value)

    def element_dicts(self) -> list[Element]:
        """Return mutable deep copies of the elements."""
        return [thaw(element) for element in self.elements]

    def import_payload(self) -> dict[str, Any]:
        """Record submitted to the host import capability.

        A copy is returned every time. Records that declare their own
        ``elements`` are submitted as declared;
        anything else (``data.elements`` entries, legacy nested arrays,
        synthesized items) is rebuilt from the derived fields.
        """
        if isinstance(self.raw, dict) and isinstance(self.raw.get("elements"), list):
            return copy.deepcopy(self.raw)
        payload: dict[str, Any] = copy.deepcopy(self.raw) if isinstance(self.raw, dict) else {}
        payload.pop("data", None)
        payload.update(
            id=self.id,
            name=self.name,
            status=self.status,
            created=self.created,
            elements=self.element_dicts(),
        )
        return payload


class BrowserState(str, Enum):
    """States of the selection/import flow."""

    BROWSING_CATALOG = "browsing_catalog"
    PREVIEWING_COLLECTION = "previewing_collection"
    IMPORTING = "importing"


class ImportMode(str, Enum):
    """Which items of a selection an import commits."""

    SELECTED = "selected"
    ALL = "all"


class CatalogLoadState(str, Enum):
    """States of the catalog loader."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class CatalogSelectionState(BaseModel):
    """Figures of one collection being browsed, plus the user's selection."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    collection: CatalogCollection
    items: tuple[LibraryItem, ...]
    selected_item_ids: set[str] = Field(default_factory=set)

    @property
    def item_ids(self) -> list[str]:
        return [item.id for item in self.items]

    def selected_items(self) -> list[LibraryItem]:
        return [item for item in self.items if item.id in self.selected_item_ids]
