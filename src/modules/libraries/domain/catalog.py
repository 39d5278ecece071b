"""Catalog domain models, parsers and ports."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal, Protocol
from urllib.parse import urlparse

from src.modules.libraries.domain.entities import CatalogCollection
from src.modules.libraries.domain.exceptions import SchemaError

CATALOG_CONTAINER_KEYS = ("libraries", "items", "collections", "catalog")
PREVIEW_URL_KEYS = ("url", "src", "image", "path")
ABSOLUTE_SCHEMES = ("http", "https", "data")

# Shown whenever the remote catalog cannot be used.
BUILTIN_CATALOG: tuple[dict[str, str], ...] = (
    {
        "name": "Arquitectura de software",
        "source": "youritjang/software-architecture.excalidrawlib",
        "description": "Componentes, servicios y bases de datos.",
    },
    {
        "name": "Diseño de sistemas",
        "source": "rohanp/system-design.excalidrawlib",
        "description": "Balanceadores, colas, cachés y clientes.",
    },
    {
        "name": "Topología de red",
        "source": "dwelle/network-topology-icons.excalidrawlib",
        "description": "Routers, switches y servidores.",
    },
    {
        "name": "Diagramas de decisión",
        "source": "aretecode/decision-flow-control.excalidrawlib",
        "description": "Figuras para flujos de control.",
    },
)


@dataclass(frozen=True)
class LibraryCatalog:
    """Result of one catalog load."""

    collections: list[CatalogCollection]
    loaded_from: Literal["remote", "builtin"]
    error_message: str | None = None


class CatalogProvider(Protocol):
    """Port for fetching the remote collection list."""

    async def fetch_collections(self) -> list[CatalogCollection]: ...


def resolve_source_url(source: str, base_url: str) -> str:
    """Resolve a collection source to a fetchable address.

    Absolute http(s) and data URIs are used as-is; anything else is a path
    relative to the hosted library repository.
    """
    value = source.strip()
    if urlparse(value).scheme.lower() in ABSOLUTE_SCHEMES:
        return value
    base = base_url if base_url.endswith("/") else f"{base_url}/"
    return f"{base}{value.lstrip('/')}"


# ----------------------------------------------------------------------------
# Catalog document shapes, tried in order
# ----------------------------------------------------------------------------


def _bare_sequence(payload: Any) -> list[Any] | None:
    return payload if isinstance(payload, list) else None


def _keyed_sequence(payload: Any) -> list[Any] | None:
    if not isinstance(payload, dict):
        return None
    for key in CATALOG_CONTAINER_KEYS:
        value = payload.get(key)
        if isinstance(value, list):
            return value
    return None


CATALOG_SHAPES: tuple[Callable[[Any], list[Any] | None], ...] = (
    _bare_sequence,
    _keyed_sequence,
)


def parse_catalog_payload(payload: Any, base_url: str) -> list[CatalogCollection]:
    """Parse a catalog document into collections.

    Raises:
        SchemaError: no recognizable collection list in the document
    """
    records: list[Any] | None = None
    for shape in CATALOG_SHAPES:
        records = shape(payload)
        if records is not None:
            break
    if records is None:
        raise SchemaError("Catalog document holds no collection list")

    collections: list[CatalogCollection] = []
    for ordinal, record in enumerate(records):
        collection = _parse_collection(record, ordinal, base_url)
        if collection is not None:
            collections.append(collection)
    return collections


def _parse_collection(
    record: Any, ordinal: int, base_url: str
) -> CatalogCollection | None:
    if not isinstance(record, dict):
        return None
    name = _non_blank(record.get("name"))
    source = _non_blank(record.get("source"))
    if name is None or source is None:
        return None

    preview = _parse_preview(record.get("preview"))
    return CatalogCollection(
        id=f"{source}-{ordinal}",
        name=name,
        source=source,
        description=_non_blank(record.get("description")),
        author=_parse_author(record.get("author")),
        preview_url=resolve_source_url(preview, base_url) if preview else None,
    )


def _parse_author(value: Any) -> str | None:
    if isinstance(value, str):
        return _non_blank(value)
    if isinstance(value, dict):
        return _non_blank(value.get("name"))
    if isinstance(value, list):
        names = [
            name
            for name in (_parse_author(v) for v in value if not isinstance(v, list))
            if name
        ]
        return ", ".join(names) or None
    return None


def _parse_preview(value: Any) -> str | None:
    if isinstance(value, str):
        return _non_blank(value)
    if isinstance(value, dict):
        for key in PREVIEW_URL_KEYS:
            url = _non_blank(value.get(key))
            if url:
                return url
    return None


def _non_blank(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def builtin_collections(base_url: str) -> list[CatalogCollection]:
    """Fixed collection list used when the remote catalog is unusable."""
    return parse_catalog_payload(list(BUILTIN_CATALOG), base_url)
