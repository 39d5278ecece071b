"""Tests for catalog parsing and the catalog loader."""

from __future__ import annotations

import anyio
import httpx
import pytest

from src.modules.libraries.application.catalog_loader import (
    CATALOG_ERROR_MESSAGE,
    CatalogLoader,
)
from src.modules.libraries.domain.catalog import (
    BUILTIN_CATALOG,
    builtin_collections,
    parse_catalog_payload,
    resolve_source_url,
)
from src.modules.libraries.domain.entities import CatalogCollection, CatalogLoadState
from src.modules.libraries.domain.exceptions import NetworkError, ParseError, SchemaError
from src.modules.libraries.infrastructure.catalog_provider import HttpCatalogProvider
from src.modules.libraries.infrastructure.fetcher import HttpDocumentFetcher

pytestmark = pytest.mark.anyio

BASE_URL = "https://libraries.example.com/libraries/"


class TestParseCatalogPayload:
    """Catalog document shapes and per-record validation."""

    def test_bare_array(self):
        collections = parse_catalog_payload(
            [{"name": "Charts", "source": "charts/charts.json"}], BASE_URL
        )

        assert len(collections) == 1
        assert collections[0].id == "charts/charts.json-0"
        assert collections[0].name == "Charts"
        assert collections[0].preview_url is None

    def test_keyed_container(self):
        payload = {"libraries": [{"name": "Flow", "source": "flow.excalidrawlib"}]}

        collections = parse_catalog_payload(payload, BASE_URL)

        assert [c.id for c in collections] == ["flow.excalidrawlib-0"]

    def test_invalid_records_skipped_but_keep_ordinal(self):
        payload = [
            {"name": "", "source": "a.json"},
            "junk",
            {"name": "Icons", "source": "icons.json"},
            {"name": "No source"},
        ]

        collections = parse_catalog_payload(payload, BASE_URL)

        assert [c.id for c in collections] == ["icons.json-2"]

    def test_same_source_gets_distinct_ids(self):
        payload = [
            {"name": "One", "source": "shared.json"},
            {"name": "Two", "source": "shared.json"},
        ]

        collections = parse_catalog_payload(payload, BASE_URL)

        assert [c.id for c in collections] == ["shared.json-0", "shared.json-1"]

    def test_optional_fields(self):
        payload = [
            {
                "name": "Network",
                "source": "net.json",
                "description": "  Routers  ",
                "authors": None,
                "author": [{"name": "Ana"}, "Luis", {"url": "x"}],
                "preview": "previews/net.png",
            }
        ]

        collection = parse_catalog_payload(payload, BASE_URL)[0]

        assert collection.description == "Routers"
        assert collection.author == "Ana, Luis"
        assert collection.preview_url == f"{BASE_URL}previews/net.png"

    def test_preview_object(self):
        payload = [
            {
                "name": "Network",
                "source": "net.json",
                "preview": {"src": "https://cdn.example.com/net.png"},
            }
        ]

        collection = parse_catalog_payload(payload, BASE_URL)[0]

        assert collection.preview_url == "https://cdn.example.com/net.png"

    def test_unrecognized_document_raises_schema_error(self):
        with pytest.raises(SchemaError):
            parse_catalog_payload({"version": 2}, BASE_URL)

    def test_initial_placeholder(self):
        collection = CatalogCollection(id="x-0", name="  diagramas", source="x")

        assert collection.initial == "D"


class TestResolveSourceUrl:
    def test_relative_source(self):
        assert (
            resolve_source_url("charts/charts.json", "https://host/libraries")
            == "https://host/libraries/charts/charts.json"
        )

    def test_leading_slash_stays_under_base(self):
        assert resolve_source_url("/a.json", BASE_URL) == f"{BASE_URL}a.json"

    def test_absolute_sources_unchanged(self):
        assert resolve_source_url("https://other/x.json", BASE_URL) == "https://other/x.json"
        assert resolve_source_url("data:,[]", BASE_URL) == "data:,[]"


class TestBuiltinCatalog:
    def test_every_entry_is_valid(self):
        collections = builtin_collections(BASE_URL)

        assert len(collections) == len(BUILTIN_CATALOG)
        assert len({c.id for c in collections}) == len(collections)


class TestCatalogLoader:
    """State machine idle -> loading -> {ready, error}."""

    async def test_successful_load(self, make_catalog_provider, charts_collection):
        loader = CatalogLoader(make_catalog_provider([charts_collection]), base_url=BASE_URL)
        assert loader.state == CatalogLoadState.IDLE

        await loader.load()

        assert loader.state == CatalogLoadState.READY
        assert loader.loaded_from == "remote"
        assert loader.error_message is None
        assert loader.get("charts/charts.json-0") == charts_collection

    @pytest.mark.parametrize(
        "error",
        [NetworkError("HTTP 500"), ParseError("not json"), SchemaError("no list")],
    )
    async def test_failure_falls_back_to_builtin(self, make_catalog_provider, error):
        loader = CatalogLoader(make_catalog_provider(error=error), base_url=BASE_URL)

        await loader.load()

        assert loader.state == CatalogLoadState.ERROR
        assert loader.loaded_from == "builtin"
        assert loader.error_message == CATALOG_ERROR_MESSAGE
        assert [c.id for c in loader.collections] == [
            c.id for c in builtin_collections(BASE_URL)
        ]

    async def test_empty_catalog_falls_back(self, make_catalog_provider):
        loader = CatalogLoader(make_catalog_provider([]), base_url=BASE_URL)

        await loader.load()

        assert loader.state == CatalogLoadState.ERROR
        assert loader.catalog.loaded_from == "builtin"

    async def test_load_is_noop_while_loading(self, make_catalog_provider):
        provider = make_catalog_provider()
        loader = CatalogLoader(provider, base_url=BASE_URL)
        loader.state = CatalogLoadState.LOADING

        await loader.load()

        assert provider.calls == 0
        assert loader.state == CatalogLoadState.LOADING

    async def test_concurrent_loads_share_one_fetch(
        self, make_gated_catalog_provider, charts_collection
    ):
        provider = make_gated_catalog_provider([charts_collection])
        loader = CatalogLoader(provider, base_url=BASE_URL)
        seen: list[list[str]] = []

        async def load_and_record() -> None:
            await loader.load()
            seen.append([c.id for c in loader.collections])

        async with anyio.create_task_group() as tg:
            tg.start_soon(load_and_record)
            tg.start_soon(load_and_record)
            await anyio.wait_all_tasks_blocked()
            assert loader.state == CatalogLoadState.LOADING
            assert seen == []
            provider.release.set()

        assert provider.calls == 1
        assert seen == [["charts/charts.json-0"], ["charts/charts.json-0"]]
        assert loader.state == CatalogLoadState.READY

    async def test_ensure_loaded_only_loads_once(self, make_catalog_provider, charts_collection):
        provider = make_catalog_provider([charts_collection])
        loader = CatalogLoader(provider, base_url=BASE_URL)

        await loader.ensure_loaded()
        await loader.ensure_loaded()

        assert provider.calls == 1
        assert loader.state == CatalogLoadState.READY

    async def test_reload_after_error(self, make_catalog_provider, charts_collection):
        provider = make_catalog_provider(error=NetworkError("offline"))
        loader = CatalogLoader(provider, base_url=BASE_URL)
        await loader.load()

        provider.error = None
        provider.collections = [charts_collection]
        await loader.load()

        assert loader.state == CatalogLoadState.READY
        assert loader.loaded_from == "remote"
        assert loader.error_message is None

    async def test_unexpected_error_propagates(self, make_catalog_provider):
        loader = CatalogLoader(make_catalog_provider(error=RuntimeError("bug")))

        with pytest.raises(RuntimeError):
            await loader.load()
        assert loader.state == CatalogLoadState.IDLE

    async def test_dismiss_error_keeps_builtin_list(self, make_catalog_provider):
        loader = CatalogLoader(make_catalog_provider(error=NetworkError("x")))
        await loader.load()

        loader.dismiss_error()

        assert loader.error_message is None
        assert loader.collections


class TestHttpCatalogProvider:
    async def test_fetch_and_parse(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert str(request.url) == "https://catalog.example.com/libraries.json"
            return httpx.Response(
                200, json=[{"name": "Charts", "source": "charts/charts.json"}]
            )

        provider = HttpCatalogProvider(
            HttpDocumentFetcher(transport=httpx.MockTransport(handler)),
            catalog_url="https://catalog.example.com/libraries.json",
            base_url=BASE_URL,
        )

        collections = await provider.fetch_collections()

        assert [c.id for c in collections] == ["charts/charts.json-0"]

    async def test_http_error_drives_fallback(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(503))
        provider = HttpCatalogProvider(
            HttpDocumentFetcher(transport=transport),
            catalog_url="https://catalog.example.com/libraries.json",
            base_url=BASE_URL,
        )
        loader = CatalogLoader(provider, base_url=BASE_URL)

        await loader.load()

        assert loader.state == CatalogLoadState.ERROR
        assert loader.loaded_from == "builtin"
