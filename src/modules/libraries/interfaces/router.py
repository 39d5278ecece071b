"""Library API routes."""

from fastapi import APIRouter, Depends, Query, Request, Response

from src.core.domain.exceptions import ValidationError
from src.core.interfaces.http.response import ApiResponse
from src.modules.libraries.application.catalog_loader import CatalogLoader
from src.modules.libraries.application.dependencies import (
    get_catalog_loader,
    get_library_service,
    get_preview_cache,
)
from src.modules.libraries.application.library_service import (
    LibraryService,
    local_collection,
)
from src.modules.libraries.application.preview_cache import PreviewHydrationCache
from src.modules.libraries.domain.entities import (
    CatalogCollection,
    LibraryItem,
)
from src.modules.libraries.domain.exceptions import (
    CollectionNotFoundError,
    PreviewUnavailableError,
)
from src.modules.libraries.interfaces.schemas import (
    CatalogResponse,
    CollectionResponse,
    LibraryItemResponse,
    LibraryItemsResponse,
)

router = APIRouter(prefix="/libraries", tags=["libraries"])

SVG_MEDIA_TYPE = "image/svg+xml"


def _to_collection_response(
    collection: CatalogCollection, service: LibraryService
) -> CollectionResponse:
    return CollectionResponse(
        id=collection.id,
        name=collection.name,
        source=collection.source,
        url=service.resolve(collection),
        description=collection.description,
        author=collection.author,
        preview_url=collection.preview_url,
        initial=collection.initial,
    )


def _to_item_response(item: LibraryItem, service: LibraryService) -> LibraryItemResponse:
    return LibraryItemResponse(
        id=item.id,
        name=item.name,
        status=item.status,
        created=item.created,
        element_count=len(item.elements),
        elements=item.element_dicts(),
        preview_svg=service.render(item.elements).markup,
    )


async def _require_collection(loader: CatalogLoader, collection_id: str) -> CatalogCollection:
    await loader.ensure_loaded()
    collection = loader.get(collection_id)
    if collection is None:
        raise CollectionNotFoundError(collection_id)
    return collection


@router.get(
    "/catalog",
    response_model=ApiResponse[CatalogResponse],
    summary="List library collections",
    description="Remote catalog, or the built-in list when it cannot be loaded",
)
async def get_catalog(
    refresh: bool = Query(False, description="Reload the remote catalog"),
    loader: CatalogLoader = Depends(get_catalog_loader),
    service: LibraryService = Depends(get_library_service),
) -> ApiResponse[CatalogResponse]:
    if refresh:
        await loader.load()
    else:
        await loader.ensure_loaded()

    catalog = loader.catalog
    return ApiResponse.success(
        data=CatalogResponse(
            collections=[
                _to_collection_response(c, service) for c in catalog.collections
            ],
            loaded_from=catalog.loaded_from,
            state=loader.state.value,
            error_message=catalog.error_message,
        )
    )


@router.get(
    "/catalog/{collection_id:path}/items",
    response_model=ApiResponse[LibraryItemsResponse],
    summary="List the figures of a collection",
)
async def get_collection_items(
    collection_id: str,
    loader: CatalogLoader = Depends(get_catalog_loader),
    service: LibraryService = Depends(get_library_service),
) -> ApiResponse[LibraryItemsResponse]:
    collection = await _require_collection(loader, collection_id)
    items = await service.load_items(collection)
    return ApiResponse.success(
        data=LibraryItemsResponse(
            collection=_to_collection_response(collection, service),
            items=[_to_item_response(item, service) for item in items],
        )
    )


@router.get(
    "/catalog/{collection_id:path}/preview.svg",
    summary="Representative preview of a collection",
    description="Hydrated lazily; 404 means the client keeps its letter placeholder",
    response_class=Response,
)
async def get_collection_preview(
    collection_id: str,
    loader: CatalogLoader = Depends(get_catalog_loader),
    cache: PreviewHydrationCache = Depends(get_preview_cache),
) -> Response:
    collection = await _require_collection(loader, collection_id)
    await cache.hydrate(collection)
    drawing = cache.preview_for(collection.id)
    if drawing is None:
        raise PreviewUnavailableError(collection.id)
    return Response(content=drawing.markup, media_type=SVG_MEDIA_TYPE)


@router.post(
    "/parse",
    response_model=ApiResponse[LibraryItemsResponse],
    summary="Normalize a local library file",
    description="The request body is the raw library document",
)
async def parse_library(
    request: Request,
    filename: str = Query("library.excalidrawlib", min_length=1, max_length=255),
    service: LibraryService = Depends(get_library_service),
) -> ApiResponse[LibraryItemsResponse]:
    content = await request.body()
    if not content.strip():
        raise ValidationError("Request body is empty")
    items = service.parse_document(content, filename)
    collection = local_collection(filename)
    return ApiResponse.success(
        data=LibraryItemsResponse(
            collection=_to_collection_response(collection, service),
            items=[_to_item_response(item, service) for item in items],
        )
    )
