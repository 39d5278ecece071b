"""Library module application dependencies.

Declares the services the router needs without importing infrastructure;
the application entrypoint installs the concrete providers as overrides.
"""

from typing import NoReturn

from src.modules.libraries.application.catalog_loader import CatalogLoader
from src.modules.libraries.application.library_service import LibraryService
from src.modules.libraries.application.preview_cache import PreviewHydrationCache


def _missing_dependency(name: str) -> NoReturn:
    raise RuntimeError(f"Missing dependency override for {name}")


async def get_catalog_loader() -> CatalogLoader:
    _missing_dependency("CatalogLoader")


async def get_library_service() -> LibraryService:
    _missing_dependency("LibraryService")


async def get_preview_cache() -> PreviewHydrationCache:
    _missing_dependency("PreviewHydrationCache")
