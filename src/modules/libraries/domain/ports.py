"""Ports the library engine depends on but never constructs."""

from typing import Any, Protocol


class DocumentFetcher(Protocol):
    """Port for fetching and decoding JSON documents by address."""

    async def fetch_json(self, url: str) -> Any: ...


class ImportCapability(Protocol):
    """Host capability merging items into the canvas working set."""

    async def import_items(self, records: list[dict[str, Any]]) -> None: ...


class ReplaceLibraryCapability(Protocol):
    """Lower-level host fallback replacing the library contents."""

    async def replace_library(self, records: list[dict[str, Any]]) -> None: ...


class NotifyCapability(Protocol):
    """Host capability showing transient user feedback."""

    def notify(self, message: str, duration_ms: int) -> None: ...
