"""Library API schemas."""

from typing import Any, Literal

from pydantic import BaseModel, Field


class CollectionResponse(BaseModel):
    """Catalog collection."""

    id: str = Field(..., description="Collection id (source + ordinal)")
    name: str = Field(..., description="Display name")
    source: str = Field(..., description="Library source as declared in the catalog")
    url: str = Field(..., description="Resolved fetch address")
    description: str | None = Field(None, description="Description")
    author: str | None = Field(None, description="Author(s)")
    preview_url: str | None = Field(None, description="Catalog supplied preview image")
    initial: str = Field(..., description="Placeholder letter")


class CatalogResponse(BaseModel):
    """Catalog load result."""

    collections: list[CollectionResponse]
    loaded_from: Literal["remote", "builtin"]
    state: str = Field(..., description="Loader state")
    error_message: str | None = Field(None, description="Dismissible load error")


class LibraryItemResponse(BaseModel):
    """Normalized figure with its preview."""

    id: str
    name: str
    status: str
    created: int
    element_count: int
    elements: list[dict[str, Any]]
    preview_svg: str = Field(..., description="Standalone SVG document")


class LibraryItemsResponse(BaseModel):
    """Figures of one collection or local document."""

    collection: CollectionResponse
    items: list[LibraryItemResponse]

    class Config:
        json_schema_extra = {
            "example": {
                "collection": {
                    "id": "charts/charts.json-0",
                    "name": "Charts",
                    "source": "charts/charts.json",
                    "url": "https://libraries.excalidraw.com/libraries/charts/charts.json",
                    "initial": "C",
                },
                "items": [],
            }
        }
