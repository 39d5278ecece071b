"""figurario - library catalog ingestion & preview service entrypoint."""

import sentry_sdk
from fastapi import FastAPI
from fastapi.concurrency import asynccontextmanager
from fastapi.routing import APIRoute
from loguru import logger
from starlette.middleware.cors import CORSMiddleware

from src.core.config import settings
from src.core.domain.exceptions import DomainException
from src.core.infrastructure.logging import setup_logging
from src.core.interfaces.http.exceptions import (
    domain_exception_handler,
    global_exception_handler,
)
from src.core.interfaces.http.routers import api_router
from src.modules.libraries.application import dependencies as libraries_app_deps
from src.modules.libraries.infrastructure import dependencies as libraries_infra_deps

APP_VERSION = "0.1.0"


def custom_generate_unique_id(route: APIRoute) -> str:
    """Generate unique operation IDs for OpenAPI."""
    if route.tags:
        return f"{route.tags[0]}-{route.name}"
    return route.name


# Initialize Sentry if configured
if settings.SENTRY_DSN and settings.ENVIRONMENT != "local":
    sentry_sdk.init(
        dsn=str(settings.SENTRY_DSN),
        enable_tracing=True,
        environment=settings.ENVIRONMENT,
    )


@asynccontextmanager
async def lifespan(_: FastAPI):
    """Application lifespan manager."""
    setup_logging()
    logger.info("Starting figurario backend...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Catalog: {settings.CATALOG_URL}")

    yield

    logger.info("Shutting down figurario backend...")


app = FastAPI(
    title=settings.PROJECT_NAME,
    description=(
        "Library catalog ingestion & preview engine\n\n"
        "Locates the figures of library documents of any shape, normalizes "
        "them and renders SVG previews for the drawing canvas."
    ),
    version=APP_VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url=f"{settings.API_V1_STR}/docs",
    redoc_url=f"{settings.API_V1_STR}/redoc",
    root_path=settings.ROOTPATH,
    generate_unique_id_function=custom_generate_unique_id,
    lifespan=lifespan,
)

# Dependency overrides (application -> infrastructure)
app.dependency_overrides[libraries_app_deps.get_catalog_loader] = (
    libraries_infra_deps.get_catalog_loader
)
app.dependency_overrides[libraries_app_deps.get_library_service] = (
    libraries_infra_deps.get_library_service
)
app.dependency_overrides[libraries_app_deps.get_preview_cache] = (
    libraries_infra_deps.get_preview_cache
)

# Exception handlers
app.add_exception_handler(DomainException, domain_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

# CORS middleware
if settings.all_cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.all_cors_origins,
        allow_credentials=True,
        allow_methods=settings.CORS_ALLOW_METHODS,
        allow_headers=settings.CORS_ALLOW_HEADERS,
    )

# Include API router
app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/health", tags=["health"])
async def health_check():
    """Health check endpoint.

    The service holds no database; it reports the catalog loader state so a
    probe can tell a remote catalog from the built-in fallback.
    """
    loader = await libraries_infra_deps.get_catalog_loader()
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "version": APP_VERSION,
        "components": {
            "catalog": {
                "state": loader.state.value,
                "loaded_from": loader.loaded_from,
                "collections": len(loader.collections),
            },
        },
    }


@app.get("/", tags=["root"])
async def root():
    """Root endpoint."""
    return {
        "message": "Welcome to figurario API",
        "docs": f"{settings.API_V1_STR}/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.SERVER_PORT,
        reload=settings.ENVIRONMENT == "local",
    )
