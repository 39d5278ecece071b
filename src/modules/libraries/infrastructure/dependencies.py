"""Library module dependencies.

Catalog state and the preview cache live for the whole process, like a
browser session of the drawing application.
"""

from functools import lru_cache

from src.modules.libraries.application.catalog_loader import CatalogLoader
from src.modules.libraries.application.library_service import LibraryService
from src.modules.libraries.application.preview_cache import PreviewHydrationCache
from src.modules.libraries.infrastructure.catalog_provider import HttpCatalogProvider
from src.modules.libraries.infrastructure.fetcher import HttpDocumentFetcher


@lru_cache
def get_document_fetcher() -> HttpDocumentFetcher:
    return HttpDocumentFetcher()


@lru_cache
def _library_service() -> LibraryService:
    return LibraryService(get_document_fetcher())


@lru_cache
def _catalog_loader() -> CatalogLoader:
    return CatalogLoader(HttpCatalogProvider(get_document_fetcher()))


@lru_cache
def _preview_cache() -> PreviewHydrationCache:
    return PreviewHydrationCache(_library_service())


async def get_library_service() -> LibraryService:
    return _library_service()


async def get_catalog_loader() -> CatalogLoader:
    return _catalog_loader()


async def get_preview_cache() -> PreviewHydrationCache:
    return _preview_cache()
