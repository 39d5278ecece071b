"""Logging configuration with structlog integration.

Two loggers are used side by side:
1. loguru: general diagnostic logs
2. structlog: structured logs for key business events
"""

import sys
from typing import Any

import structlog
from loguru import logger

from src.core.config import settings


def setup_logging() -> None:
    """Configure application logging with structlog and loguru."""
    _configure_structlog()
    _configure_loguru()

    logger.info(f"Logging configured with level: {settings.LOG_LEVEL}")


def _configure_structlog() -> None:
    """Configure the structlog processor chain."""
    # Human readable locally, JSON everywhere else
    if settings.ENVIRONMENT == "local":
        renderer = structlog.dev.ConsoleRenderer(colors=True)
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.CallsiteParameterAdder(
                [
                    structlog.processors.CallsiteParameter.MODULE,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            ),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            _get_log_level_number(settings.LOG_LEVEL)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def _configure_loguru() -> None:
    """Configure loguru."""
    logger.remove()

    logger.add(
        sys.stderr,
        level=settings.LOG_LEVEL,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=True,
    )

    if settings.ENVIRONMENT != "local":
        logger.add(
            "logs/figurario_{time:YYYY-MM-DD}.log",
            rotation="00:00",
            retention="30 days",
            level="INFO",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        )


def _get_log_level_number(level: str) -> int:
    levels = {
        "DEBUG": 10,
        "INFO": 20,
        "WARNING": 30,
        "ERROR": 40,
        "CRITICAL": 50,
    }
    return levels.get(level.upper(), 20)


# ============================================================================
# Business event loggers
# ============================================================================


def get_business_logger() -> structlog.BoundLogger:
    """Return the business event logger.

    Usage:
        from src.core.infrastructure.logging import get_business_logger

        log = get_business_logger()
        log.info("library_extracted", collection_id="charts-0", item_count=12)
    """
    return structlog.get_logger("business")


class BusinessEvents:
    """Business event logging helpers.

    Keeps the event names and fields consistent across services.

    Usage:
        from src.core.infrastructure.logging import BusinessEvents

        BusinessEvents.catalog_loaded(collection_count=42, loaded_from="remote")
    """

    _log = structlog.get_logger("business.events")

    @classmethod
    def catalog_loaded(
        cls,
        collection_count: int,
        loaded_from: str,
        **extra: Any,
    ) -> None:
        cls._log.info(
            "catalog_loaded",
            event_type="catalog",
            collection_count=collection_count,
            loaded_from=loaded_from,
            **extra,
        )

    @classmethod
    def catalog_fallback(
        cls,
        reason: str,
        error_kind: str,
        **extra: Any,
    ) -> None:
        """Log a fall back to the built-in catalog."""
        cls._log.warning(
            "catalog_fallback",
            event_type="degradation",
            reason=reason,
            error_kind=error_kind,
            **extra,
        )

    @classmethod
    def library_extracted(
        cls,
        source: str,
        candidate_count: int,
        item_count: int,
        **extra: Any,
    ) -> None:
        cls._log.info(
            "library_extracted",
            event_type="extract",
            source=source,
            candidate_count=candidate_count,
            item_count=item_count,
            **extra,
        )

    @classmethod
    def preview_hydrated(
        cls,
        collection_id: str,
        element_count: int,
        **extra: Any,
    ) -> None:
        cls._log.info(
            "preview_hydrated",
            event_type="preview",
            collection_id=collection_id,
            element_count=element_count,
            **extra,
        )

    @classmethod
    def preview_hydration_failed(
        cls,
        collection_id: str,
        error: str,
        **extra: Any,
    ) -> None:
        cls._log.warning(
            "preview_hydration_failed",
            event_type="preview_error",
            collection_id=collection_id,
            error=error,
            **extra,
        )

    @classmethod
    def import_committed(
        cls,
        collection_id: str,
        item_count: int,
        capability: str,
        **extra: Any,
    ) -> None:
        """Log a successful import into the host canvas."""
        cls._log.info(
            "import_committed",
            event_type="import",
            collection_id=collection_id,
            item_count=item_count,
            capability=capability,
            **extra,
        )

    @classmethod
    def import_rejected(
        cls,
        collection_id: str | None,
        reason: str,
        **extra: Any,
    ) -> None:
        cls._log.warning(
            "import_rejected",
            event_type="import_error",
            collection_id=collection_id,
            reason=reason,
            **extra,
        )
