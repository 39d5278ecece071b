"""Catalog loading with built-in fallback."""

from __future__ import annotations

from typing import Literal

import anyio
from loguru import logger

from src.core.config import settings
from src.core.infrastructure.logging import BusinessEvents
from src.modules.libraries.domain.catalog import (
    CatalogProvider,
    LibraryCatalog,
    builtin_collections,
)
from src.modules.libraries.domain.entities import CatalogCollection, CatalogLoadState
from src.modules.libraries.domain.exceptions import LibraryError, SchemaError

CATALOG_ERROR_MESSAGE = (
    "No se pudo cargar el catálogo de bibliotecas. Mostrando la lista integrada."
)


class CatalogLoader:
    """State machine ``idle -> loading -> {ready, error}``.

    ``ready`` and ``error`` are terminal until ``load()`` is called again. On
    any failure the built-in collection list is exposed so the catalog view is
    never empty.
    """

    def __init__(self, provider: CatalogProvider, base_url: str | None = None) -> None:
        self.provider = provider
        self.base_url = base_url or settings.LIBRARY_BASE_URL
        self.state = CatalogLoadState.IDLE
        self.collections: list[CatalogCollection] = []
        self.error_message: str | None = None
        self.loaded_from: Literal["remote", "builtin"] | None = None
        self._load_done: anyio.Event | None = None

    @property
    def catalog(self) -> LibraryCatalog:
        return LibraryCatalog(
            collections=list(self.collections),
            loaded_from=self.loaded_from or "builtin",
            error_message=self.error_message,
        )

    def get(self, collection_id: str) -> CatalogCollection | None:
        for collection in self.collections:
            if collection.id == collection_id:
                return collection
        return None

    def dismiss_error(self) -> None:
        self.error_message = None

    async def ensure_loaded(self) -> None:
        """Load once; callers arriving mid-load wait for that load to settle."""
        if self.state in (CatalogLoadState.IDLE, CatalogLoadState.LOADING):
            await self.load()

    async def load(self) -> None:
        """Load the catalog.

        While a load is in flight no second fetch is started; the caller waits
        for the running one and then sees its outcome.
        """
        if self.state == CatalogLoadState.LOADING:
            logger.debug("Catalog load already in flight, waiting for it")
            if self._load_done is not None:
                await self._load_done.wait()
            return

        self.state = CatalogLoadState.LOADING
        done = self._load_done = anyio.Event()
        try:
            collections = await self.provider.fetch_collections()
            if not collections:
                raise SchemaError("Catalog document lists no valid collections")
        except LibraryError as exc:
            self._fall_back(exc)
        except Exception:
            self.state = CatalogLoadState.IDLE
            raise
        else:
            self.collections = collections
            self.loaded_from = "remote"
            self.error_message = None
            self.state = CatalogLoadState.READY
            BusinessEvents.catalog_loaded(
                collection_count=len(collections), loaded_from="remote"
            )
        finally:
            done.set()

    def _fall_back(self, exc: LibraryError) -> None:
        logger.warning(f"Failed to load library catalog: {exc.message}")
        self.collections = builtin_collections(self.base_url)
        self.loaded_from = "builtin"
        self.error_message = CATALOG_ERROR_MESSAGE
        self.state = CatalogLoadState.ERROR
        BusinessEvents.catalog_fallback(
            reason=exc.message, error_kind=type(exc).__name__
        )
        BusinessEvents.catalog_loaded(
            collection_count=len(self.collections), loaded_from="builtin"
        )
