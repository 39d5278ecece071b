"""Lazy, deduplicated preview hydration for catalog cards."""

from __future__ import annotations

from types import MappingProxyType

from loguru import logger

from src.core.infrastructure.logging import BusinessEvents
from src.modules.libraries.application.library_service import LibraryService
from src.modules.libraries.domain.entities import CatalogCollection
from src.modules.libraries.domain.exceptions import LibraryError
from src.modules.libraries.domain.preview import PreviewDrawing


class PreviewHydrationCache:
    """One representative preview per collection id.

    Entries are written at most once and never invalidated within a session.
    A request for an id already cached or in flight is a no-op, so at most one
    fetch per collection id runs at any time. The check-then-set below relies
    on cooperative scheduling: nothing can interleave between the membership
    check and the write.
    """

    def __init__(self, library_service: LibraryService) -> None:
        self.library_service = library_service
        self._previews: dict[str, tuple[MappingProxyType, ...]] = {}
        self._in_flight: set[str] = set()

    def __contains__(self, collection_id: str) -> bool:
        return collection_id in self._previews

    def is_in_flight(self, collection_id: str) -> bool:
        return collection_id in self._in_flight

    def elements_for(self, collection_id: str) -> tuple[MappingProxyType, ...] | None:
        return self._previews.get(collection_id)

    def preview_for(self, collection_id: str) -> PreviewDrawing | None:
        elements = self._previews.get(collection_id)
        if elements is None:
            return None
        return self.library_service.render(elements)

    async def hydrate(self, collection: CatalogCollection) -> None:
        """Fetch and cache the first non-empty item of a collection.

        Fetch failures are logged and swallowed: the caller keeps showing the
        initial-letter placeholder.
        """
        collection_id = collection.id
        if collection_id in self._previews or collection_id in self._in_flight:
            return

        self._in_flight.add(collection_id)
        try:
            items = await self.library_service.load_items(collection)
        except LibraryError as exc:
            logger.debug(f"Preview hydration failed for {collection_id}: {exc.message}")
            BusinessEvents.preview_hydration_failed(
                collection_id=collection_id, error=exc.message
            )
            return
        finally:
            self._in_flight.discard(collection_id)

        representative = next((item for item in items if item.elements), None)
        if representative is None:
            logger.debug(f"No figures to preview in {collection_id}")
            return
        # first successful writer wins
        if collection_id in self._previews:
            return
        self._previews[collection_id] = representative.elements
        BusinessEvents.preview_hydrated(
            collection_id=collection_id,
            element_count=len(representative.elements),
        )
