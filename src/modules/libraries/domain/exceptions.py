"""Library domain exceptions."""

from fastapi import status

from src.core.domain.exceptions import DomainException, EntityNotFoundError


class LibraryError(DomainException):
    """Base class for catalog and library ingestion errors."""

    error_code = "LIBRARY_ERROR"


class NetworkError(LibraryError):
    """Raised when a fetch is rejected or answers with a non-success status."""

    http_status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "NETWORK_ERROR"


class ParseError(LibraryError):
    """Raised when a body is not valid JSON."""

    http_status_code = status.HTTP_422_UNPROCESSABLE_CONTENT
    error_code = "PARSE_ERROR"


class SchemaError(LibraryError):
    """Raised when valid JSON holds no recognizable collection list or figures."""

    http_status_code = status.HTTP_422_UNPROCESSABLE_CONTENT
    error_code = "SCHEMA_ERROR"


class LibraryImportError(LibraryError):
    """Raised when the host import capability rejects the items."""

    http_status_code = status.HTTP_502_BAD_GATEWAY
    error_code = "IMPORT_ERROR"


class CollectionNotFoundError(EntityNotFoundError):
    """Raised when a collection id is not part of the loaded catalog."""

    def __init__(self, collection_id: str):
        super().__init__("Collection", collection_id)


class ImportUnavailableError(LibraryImportError):
    """Raised when the host exposes neither an import nor a replace capability."""

    def __init__(self) -> None:
        super().__init__("Host exposes no import capability")


class PreviewUnavailableError(EntityNotFoundError):
    """Raised when no representative preview could be hydrated."""

    error_code = "PREVIEW_UNAVAILABLE"

    def __init__(self, collection_id: str):
        super().__init__("Preview", collection_id)
