"""API router configuration."""

from fastapi import APIRouter

from src.modules.libraries.interfaces.router import router as libraries_router

api_router = APIRouter()

# Libraries
api_router.include_router(libraries_router)
