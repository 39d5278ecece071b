"""
pytest configuration and shared fixtures.

Test layout:
- unit/: unit tests, no network access

Usage:
    # run all tests
    uv run pytest

    # unit tests only
    uv run pytest tests/unit/

    # with coverage
    uv run pytest --cov=src --cov-report=html
"""

from collections.abc import AsyncGenerator
from typing import Any

import anyio
import pytest
from httpx import ASGITransport, AsyncClient

from src.modules.libraries.application.catalog_loader import CatalogLoader
from src.modules.libraries.application.library_service import LibraryService
from src.modules.libraries.application.preview_cache import PreviewHydrationCache
from src.modules.libraries.domain.entities import CatalogCollection
from src.modules.libraries.domain.exceptions import NetworkError

BASE_URL = "https://libraries.example.com/libraries/"


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


# ============================================
# Fakes
# ============================================


class InMemoryFetcher:
    """DocumentFetcher serving canned documents by URL.

    Unknown URLs raise NetworkError like a failed request would.
    """

    def __init__(self, documents: dict[str, Any] | None = None) -> None:
        self.documents: dict[str, Any] = dict(documents or {})
        self.calls: list[str] = []

    async def fetch_json(self, url: str) -> Any:
        self.calls.append(url)
        document = self.documents.get(url)
        if isinstance(document, Exception):
            raise document
        if document is None:
            raise NetworkError(f"HTTP 404 for {url}")
        return document


class StaticCatalogProvider:
    """CatalogProvider returning a fixed list or raising a fixed error."""

    def __init__(
        self,
        collections: list[CatalogCollection] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.collections = collections or []
        self.error = error
        self.calls = 0

    async def fetch_collections(self) -> list[CatalogCollection]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.collections)


class GatedCatalogProvider(StaticCatalogProvider):
    """StaticCatalogProvider that holds every fetch until ``release`` is set."""

    def __init__(self, collections: list[CatalogCollection] | None = None) -> None:
        super().__init__(collections)
        self.release = anyio.Event()

    async def fetch_collections(self) -> list[CatalogCollection]:
        await self.release.wait()
        return await super().fetch_collections()


class RecordingNotifier:
    """NotifyCapability keeping every message."""

    def __init__(self) -> None:
        self.messages: list[tuple[str, int]] = []

    def notify(self, message: str, duration_ms: int) -> None:
        self.messages.append((message, duration_ms))

    @property
    def texts(self) -> list[str]:
        return [message for message, _ in self.messages]


# ============================================
# Domain object fixtures
# ============================================


@pytest.fixture
def charts_collection() -> CatalogCollection:
    """Collection as parsed from the remote catalog."""
    return CatalogCollection(
        id="charts/charts.json-0",
        name="Charts",
        source="charts/charts.json",
    )


@pytest.fixture
def shapes_document() -> dict[str, Any]:
    """Current-format library document with two figures."""
    return {
        "type": "excalidrawlib",
        "version": 2,
        "libraryItems": [
            {
                "id": "box",
                "name": "Box",
                "status": "published",
                "created": 1700000000000,
                "elements": [
                    {
                        "type": "rectangle",
                        "x": 0,
                        "y": 0,
                        "width": 100,
                        "height": 50,
                        "strokeColor": "#1971c2",
                    }
                ],
            },
            {
                "elements": [
                    {"type": "ellipse", "x": 10, "y": 10, "width": 40, "height": 40},
                    {"type": "text", "x": 12, "y": 20, "text": "DB", "fontSize": 16},
                ],
            },
        ],
    }


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def make_fetcher() -> type[InMemoryFetcher]:
    """Factory for fetchers serving custom documents."""
    return InMemoryFetcher


@pytest.fixture
def make_catalog_provider() -> type[StaticCatalogProvider]:
    return StaticCatalogProvider


@pytest.fixture
def make_gated_catalog_provider() -> type[GatedCatalogProvider]:
    return GatedCatalogProvider


@pytest.fixture
def fetcher(charts_collection, shapes_document) -> InMemoryFetcher:
    return InMemoryFetcher({f"{BASE_URL}{charts_collection.source}": shapes_document})


@pytest.fixture
def library_service(fetcher) -> LibraryService:
    return LibraryService(fetcher, base_url=BASE_URL)


# ============================================
# HTTP client fixtures
# ============================================


@pytest.fixture
async def async_client(
    fetcher, library_service, charts_collection
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for API tests, wired to in-memory services."""
    from main import app
    from src.modules.libraries.application import dependencies as libraries_app_deps

    loader = CatalogLoader(StaticCatalogProvider([charts_collection]), base_url=BASE_URL)
    cache = PreviewHydrationCache(library_service)

    app.dependency_overrides[libraries_app_deps.get_catalog_loader] = lambda: loader
    app.dependency_overrides[libraries_app_deps.get_library_service] = lambda: library_service
    app.dependency_overrides[libraries_app_deps.get_preview_cache] = lambda: cache

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    # restore the application wiring
    from src.modules.libraries.infrastructure import dependencies as libraries_infra_deps

    app.dependency_overrides[libraries_app_deps.get_catalog_loader] = (
        libraries_infra_deps.get_catalog_loader
    )
    app.dependency_overrides[libraries_app_deps.get_library_service] = (
        libraries_infra_deps.get_library_service
    )
    app.dependency_overrides[libraries_app_deps.get_preview_cache] = (
        libraries_infra_deps.get_preview_cache
    )
