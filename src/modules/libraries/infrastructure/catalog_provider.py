"""Infrastructure provider for the remote library catalog."""

from __future__ import annotations

from src.core.config import settings
from src.modules.libraries.domain.catalog import CatalogProvider, parse_catalog_payload
from src.modules.libraries.domain.entities import CatalogCollection
from src.modules.libraries.domain.ports import DocumentFetcher


class HttpCatalogProvider(CatalogProvider):
    """Fetch and parse the catalog document from CATALOG_URL."""

    def __init__(
        self,
        fetcher: DocumentFetcher,
        *,
        catalog_url: str | None = None,
        base_url: str | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.catalog_url = catalog_url or settings.CATALOG_URL
        self.base_url = base_url or settings.LIBRARY_BASE_URL

    async def fetch_collections(self) -> list[CatalogCollection]:
        payload = await self.fetcher.fetch_json(self.catalog_url)
        return parse_catalog_payload(payload, self.base_url)
