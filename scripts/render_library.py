#!/usr/bin/env python
"""Render the figures of a library document as SVG files.

Reads a local ``.excalidrawlib`` file or fetches a library by URL, locates
its figures whatever the document shape, and writes one SVG preview per
figure.

Usage:
    uv run python scripts/render_library.py path/to/shapes.excalidrawlib --out previews/
    uv run python scripts/render_library.py https://libraries.excalidraw.com/libraries/charts/charts.json
    uv run python scripts/render_library.py --catalog
    uv run python scripts/render_library.py shapes.excalidrawlib --json
"""

import argparse
import asyncio
import json
import re
import sys
from pathlib import Path


def _ensure_project_root_on_path() -> None:
    """Make the project root importable when the script is run directly."""
    project_root = Path(__file__).parent.parent
    project_root_str = str(project_root)
    if project_root_str not in sys.path:
        sys.path.insert(0, project_root_str)


_ensure_project_root_on_path()

_UNSAFE_FILENAME = re.compile(r"[^\w.-]+")


def _is_remote(source: str) -> bool:
    return source.split(":", 1)[0].lower() in ("http", "https", "data")


def _svg_filename(position: int, item_id: str) -> str:
    slug = _UNSAFE_FILENAME.sub("-", item_id).strip("-.") or "figure"
    return f"{position:03d}-{slug}.svg"


async def load_items(source: str):
    """Load the library items of a path or URL.

    Returns:
        (display name, list of LibraryItem)
    """
    from src.modules.libraries.application.library_service import (
        LibraryService,
        local_collection,
    )
    from src.modules.libraries.domain.entities import CatalogCollection
    from src.modules.libraries.infrastructure.fetcher import HttpDocumentFetcher

    service = LibraryService(HttpDocumentFetcher())
    if _is_remote(source):
        collection = CatalogCollection(id=f"{source}-0", name=source, source=source)
        return collection.name, await service.load_items(collection)

    path = Path(source)
    return local_collection(path.name).name, service.read_file(path)


async def list_catalog() -> dict:
    """Load the remote catalog, falling back to the built-in list."""
    from src.modules.libraries.application.catalog_loader import CatalogLoader
    from src.modules.libraries.infrastructure.catalog_provider import HttpCatalogProvider
    from src.modules.libraries.infrastructure.fetcher import HttpDocumentFetcher

    loader = CatalogLoader(HttpCatalogProvider(HttpDocumentFetcher()))
    await loader.load()
    catalog = loader.catalog
    return {
        "loaded_from": catalog.loaded_from,
        "error_message": catalog.error_message,
        "collections": [
            {"id": c.id, "name": c.name, "source": c.source, "author": c.author}
            for c in catalog.collections
        ],
    }


def write_previews(items: list, out_dir: Path) -> list[dict]:
    """Write one SVG per item and return a summary row for each."""
    from src.modules.libraries.application.library_service import LibraryService

    out_dir.mkdir(parents=True, exist_ok=True)
    rows = []
    for position, item in enumerate(items, start=1):
        drawing = LibraryService.render(item.elements)
        target = out_dir / _svg_filename(position, item.id)
        target.write_text(drawing.markup, encoding="utf-8")
        rows.append(
            {
                "id": item.id,
                "name": item.name,
                "elements": len(item.elements),
                "file": str(target),
            }
        )
    return rows


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Render library figures as SVG previews")
    parser.add_argument(
        "source",
        nargs="?",
        help="Library file path or http(s)/data URL",
    )
    parser.add_argument(
        "--out",
        type=Path,
        default=Path("previews"),
        help="Output directory for the SVG files (default: previews/)",
    )
    parser.add_argument(
        "--catalog",
        action="store_true",
        help="List the catalog collections instead of rendering a library",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print a JSON summary",
    )

    args = parser.parse_args()

    from src.core.infrastructure.logging import setup_logging
    from src.modules.libraries.domain.exceptions import LibraryError

    setup_logging()

    if args.catalog:
        result = asyncio.run(list_catalog())
        if args.json:
            print(json.dumps(result, indent=2, ensure_ascii=False))
        else:
            print(f"Catalog ({result['loaded_from']}):")
            for collection in result["collections"]:
                print(f"  {collection['id']}: {collection['name']}")
        sys.exit(0)

    if not args.source:
        parser.error("source is required unless --catalog is given")

    try:
        name, items = asyncio.run(load_items(args.source))
    except LibraryError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        sys.exit(1)

    rows = write_previews(items, args.out)
    if args.json:
        print(json.dumps({"library": name, "items": rows}, indent=2, ensure_ascii=False))
    else:
        print(f"{name}: {len(rows)} figures")
        for row in rows:
            print(f"  {row['id']} ({row['elements']} elements) -> {row['file']}")

    sys.exit(0 if rows else 1)


if __name__ == "__main__":
    main()
