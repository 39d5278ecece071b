"""Fetch, extract and normalize the figures of one collection."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from loguru import logger

from src.core.config import settings
from src.core.infrastructure.logging import BusinessEvents
from src.modules.libraries.domain.catalog import resolve_source_url
from src.modules.libraries.domain.documents import parse_json_bytes
from src.modules.libraries.domain.entities import CatalogCollection, LibraryItem
from src.modules.libraries.domain.exceptions import LibraryError
from src.modules.libraries.domain.extractor import ExtractionResult, extract_library
from src.modules.libraries.domain.ports import DocumentFetcher
from src.modules.libraries.domain.preview import PreviewDrawing, render_preview

LOCAL_SOURCE_PREFIX = "local:"


class LibraryService:
    """Turn collection sources and local documents into library items."""

    def __init__(
        self,
        fetcher: DocumentFetcher,
        *,
        base_url: str | None = None,
        max_depth: int | None = None,
        max_nodes: int | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.base_url = base_url or settings.LIBRARY_BASE_URL
        self.max_depth = max_depth if max_depth is not None else settings.EXTRACTION_MAX_DEPTH
        self.max_nodes = max_nodes if max_nodes is not None else settings.EXTRACTION_MAX_NODES

    def resolve(self, collection: CatalogCollection) -> str:
        if collection.source.startswith(LOCAL_SOURCE_PREFIX):
            return collection.source
        return resolve_source_url(collection.source, self.base_url)

    async def load_items(self, collection: CatalogCollection) -> list[LibraryItem]:
        """Fetch a collection's document and normalize its figures.

        Raises:
            NetworkError: the fetch was rejected
            ParseError: the body is not JSON
        """
        url = self.resolve(collection)
        logger.debug(f"Fetching library {collection.id} from {url}")
        document = await self.fetcher.fetch_json(url)
        return self.extract(document, source=collection.source).items

    def extract(self, document: Any, source: str = "document") -> ExtractionResult:
        result = extract_library(document, self.max_depth, self.max_nodes)
        BusinessEvents.library_extracted(
            source=source,
            candidate_count=result.candidate_count,
            item_count=len(result.items),
        )
        return result

    def parse_document(self, content: bytes | str, filename: str) -> list[LibraryItem]:
        """Normalize an uploaded or locally supplied library document."""
        document = parse_json_bytes(content, origin=filename)
        return self.extract(document, source=local_source(filename)).items

    def read_file(self, path: Path) -> list[LibraryItem]:
        try:
            content = path.read_bytes()
        except OSError as exc:
            raise LibraryError(f"Cannot read {path.name}: {exc}") from exc
        document = parse_json_bytes(content, origin=path.name)
        return self.extract(document, source=local_source(path.name)).items

    @staticmethod
    def render(elements: Sequence[Mapping[str, Any]]) -> PreviewDrawing:
        return render_preview(
            elements,
            padding=settings.PREVIEW_PADDING,
            min_width=settings.PREVIEW_MIN_WIDTH,
            min_height=settings.PREVIEW_MIN_HEIGHT,
            text_max_chars=settings.PREVIEW_TEXT_MAX_CHARS,
        )


def local_source(filename: str) -> str:
    return f"{LOCAL_SOURCE_PREFIX}{filename}"


def local_collection(filename: str) -> CatalogCollection:
    """Synthetic collection wrapping a local file."""
    source = local_source(filename)
    name = Path(filename).stem or filename
    return CatalogCollection(id=f"{source}-0", name=name, source=source)
