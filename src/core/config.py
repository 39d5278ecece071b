"""Application configuration."""

from typing import Annotated, Any, Literal

from pydantic import AnyUrl, BeforeValidator, HttpUrl, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_cors(v: Any) -> list[str] | str:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",")]
    elif isinstance(v, list | str):
        return v
    raise ValueError(v)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Application
    PROJECT_NAME: str = "figurario"
    SERVER_PORT: int = 8000
    ROOTPATH: str = ""
    API_V1_STR: str = "/api/v1"
    FRONTEND_HOST: str = "http://localhost:5173"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    LOG_LEVEL: str = "INFO"

    BACKEND_CORS_ORIGINS: Annotated[
        list[AnyUrl] | str, BeforeValidator(parse_cors)
    ] = []
    CORS_ALLOW_METHODS: list[str] = ["GET", "POST", "OPTIONS"]
    CORS_ALLOW_HEADERS: list[str] = ["*"]

    @computed_field
    @property
    def all_cors_origins(self) -> list[str]:
        return [str(origin).rstrip("/") for origin in self.BACKEND_CORS_ORIGINS] + [
            self.FRONTEND_HOST
        ]

    # Sentry
    SENTRY_DSN: HttpUrl | None = None

    # Catalog
    CATALOG_URL: str = "https://libraries.excalidraw.com/libraries.json"
    LIBRARY_BASE_URL: str = "https://libraries.excalidraw.com/libraries/"
    LIBRARY_FETCH_TIMEOUT_SEC: float | None = None  # None = wait for the transport
    FETCHER_USER_AGENT: str = "figurario/0.1 (+https://libraries.excalidraw.com)"

    # Extraction
    EXTRACTION_MAX_DEPTH: int = 5
    EXTRACTION_MAX_NODES: int = 20000

    # Preview rendering
    PREVIEW_PADDING: float = 12.0
    PREVIEW_MIN_WIDTH: float = 40.0
    PREVIEW_MIN_HEIGHT: float = 30.0
    PREVIEW_TEXT_MAX_CHARS: int = 24

    # User feedback
    TOAST_DURATION_MS: int = 2400


settings = Settings()
