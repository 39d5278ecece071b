"""Catalog -> selection -> import flow driven against host capabilities."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from loguru import logger

from src.core.config import settings
from src.core.infrastructure.logging import BusinessEvents
from src.modules.libraries.application.library_service import (
    LibraryService,
    local_collection,
)
from src.modules.libraries.domain.entities import (
    BrowserState,
    CatalogCollection,
    CatalogSelectionState,
    ImportMode,
    LibraryItem,
)
from src.modules.libraries.domain.exceptions import (
    ImportUnavailableError,
    LibraryError,
    LibraryImportError,
)
from src.modules.libraries.domain.ports import (
    ImportCapability,
    NotifyCapability,
    ReplaceLibraryCapability,
)

MSG_EMPTY_SELECTION = "Selecciona al menos una figura para importar."
MSG_IMPORT_IN_PROGRESS = "Esta biblioteca se está importando. Espera a que termine."
MSG_CLOSE_WHILE_IMPORTING = "No puedes cerrar mientras se importa una biblioteca."
MSG_LOAD_FAILED = "No se pudo cargar la biblioteca «{name}»."
MSG_NO_FIGURES = "No se encontraron figuras en «{name}»."
MSG_IMPORT_FAILED = "No se pudo importar la biblioteca. Inténtalo de nuevo."
MSG_IMPORT_UNAVAILABLE = "El lienzo no admite importar bibliotecas."
MSG_IMPORTED = "{count} figuras importadas de «{name}»."


class LibraryBrowser:
    """Selection/import state machine.

    ``browsing_catalog -> previewing_collection -> {browsing_catalog, importing}``.

    Selection changes only touch ``selected_item_ids``. Results of a fetch that
    was superseded (another collection opened, back, close) are discarded at
    the write site; the fetch itself always runs to completion.
    """

    def __init__(
        self,
        library_service: LibraryService,
        *,
        importer: ImportCapability | None = None,
        replacer: ReplaceLibraryCapability | None = None,
        notifier: NotifyCapability | None = None,
        toast_duration_ms: int | None = None,
    ) -> None:
        self.library_service = library_service
        self.importer = importer
        self.replacer = replacer
        self.notifier = notifier
        self.toast_duration_ms = toast_duration_ms or settings.TOAST_DURATION_MS

        self.state = BrowserState.BROWSING_CATALOG
        self.selection: CatalogSelectionState | None = None
        self.importing_collection_ids: set[str] = set()
        self.is_open = True
        self._pending_collection_id: str | None = None

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    async def open_collection(self, collection: CatalogCollection) -> bool:
        """Fetch a collection and list its figures."""
        if collection.id in self.importing_collection_ids:
            self._notify(MSG_IMPORT_IN_PROGRESS)
            return False

        self._pending_collection_id = collection.id
        try:
            items = await self.library_service.load_items(collection)
        except LibraryError as exc:
            logger.warning(f"Failed to open collection {collection.id}: {exc.message}")
            if self._pending_collection_id == collection.id:
                self._pending_collection_id = None
                self._notify(MSG_LOAD_FAILED.format(name=collection.name))
            return False

        if self._pending_collection_id != collection.id or not self.is_open:
            logger.debug(f"Discarding superseded items for {collection.id}")
            return False
        self._pending_collection_id = None
        return self._enter_selection(collection, items)

    def open_document(self, content: bytes | str, filename: str) -> bool:
        """List the figures of a locally supplied library document."""
        collection = local_collection(filename)
        try:
            items = self.library_service.parse_document(content, filename)
        except LibraryError as exc:
            logger.warning(f"Failed to read local library {filename}: {exc.message}")
            self._notify(MSG_LOAD_FAILED.format(name=collection.name))
            return False
        self._pending_collection_id = None
        return self._enter_selection(collection, items)

    def open_local_file(self, path: Path) -> bool:
        collection = local_collection(path.name)
        try:
            items = self.library_service.read_file(path)
        except LibraryError as exc:
            logger.warning(f"Failed to read local library {path}: {exc.message}")
            self._notify(MSG_LOAD_FAILED.format(name=collection.name))
            return False
        self._pending_collection_id = None
        return self._enter_selection(collection, items)

    def back(self) -> bool:
        """Return to the catalog list, destroying the selection."""
        self._pending_collection_id = None
        if self.state != BrowserState.PREVIEWING_COLLECTION:
            return False
        self.selection = None
        self.state = BrowserState.BROWSING_CATALOG
        return True

    def close(self) -> bool:
        """Close the dialog; refused while an import is in flight."""
        if self.is_importing:
            self._notify(MSG_CLOSE_WHILE_IMPORTING)
            return False
        self._pending_collection_id = None
        self.selection = None
        self.state = BrowserState.BROWSING_CATALOG
        self.is_open = False
        return True

    @property
    def is_importing(self) -> bool:
        return bool(self.importing_collection_ids)

    def reopen(self) -> None:
        self.is_open = True

    def _enter_selection(
        self, collection: CatalogCollection, items: list[LibraryItem]
    ) -> bool:
        if not items:
            self._notify(MSG_NO_FIGURES.format(name=collection.name))
        self.selection = CatalogSelectionState(collection=collection, items=tuple(items))
        self.state = BrowserState.PREVIEWING_COLLECTION
        return True

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def toggle_item(self, item_id: str) -> None:
        if self.selection is None or item_id not in self.selection.item_ids:
            return
        selected = self.selection.selected_item_ids
        if item_id in selected:
            selected.discard(item_id)
        else:
            selected.add(item_id)

    def select_all(self) -> None:
        if self.selection is not None:
            self.selection.selected_item_ids = set(self.selection.item_ids)

    def clear_selection(self) -> None:
        if self.selection is not None:
            self.selection.selected_item_ids = set()

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    async def import_items(self, mode: ImportMode = ImportMode.SELECTED) -> bool:
        """Commit the chosen items to the host canvas.

        An empty item set is rejected with a message: no state transition and
        no capability call. A failed import keeps the selection for a retry.
        """
        selection = self.selection
        if selection is None or self.state != BrowserState.PREVIEWING_COLLECTION:
            return False

        collection = selection.collection
        if collection.id in self.importing_collection_ids:
            self._notify(MSG_IMPORT_IN_PROGRESS)
            return False

        items = (
            list(selection.items)
            if mode == ImportMode.ALL
            else selection.selected_items()
        )
        if not items:
            self._notify(MSG_EMPTY_SELECTION)
            BusinessEvents.import_rejected(
                collection_id=collection.id, reason="empty_selection"
            )
            return False

        self.state = BrowserState.IMPORTING
        self.importing_collection_ids.add(collection.id)
        try:
            capability = await self._commit([item.import_payload() for item in items])
        except LibraryImportError as exc:
            logger.warning(f"Import of {collection.id} failed: {exc.message}")
            BusinessEvents.import_rejected(collection_id=collection.id, reason=exc.message)
            if self.selection is selection:
                self.state = BrowserState.PREVIEWING_COLLECTION
            self._notify(
                MSG_IMPORT_UNAVAILABLE
                if isinstance(exc, ImportUnavailableError)
                else MSG_IMPORT_FAILED
            )
            return False
        finally:
            self.importing_collection_ids.discard(collection.id)

        BusinessEvents.import_committed(
            collection_id=collection.id, item_count=len(items), capability=capability
        )
        self._notify(MSG_IMPORTED.format(count=len(items), name=collection.name))
        if self.selection is selection:
            self.selection = None
            self.state = BrowserState.BROWSING_CATALOG
        return True

    async def _commit(self, records: list[dict[str, Any]]) -> str:
        try:
            if self.importer is not None:
                await self.importer.import_items(records)
                return "import_items"
            if self.replacer is not None:
                await self.replacer.replace_library(records)
                return "replace_library"
        except LibraryImportError:
            raise
        except Exception as exc:
            raise LibraryImportError(f"Host rejected the import: {exc}") from exc
        raise ImportUnavailableError()

    def _notify(self, message: str) -> None:
        if self.notifier is None:
            return
        self.notifier.notify(message, self.toast_duration_ms)

