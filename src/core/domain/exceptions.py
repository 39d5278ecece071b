"""Base domain exceptions.

Every domain exception derives from DomainException and may declare the
http_status_code and error_code class attributes used by the HTTP layer.
"""

from fastapi import status


class DomainException(Exception):
    """Base exception for all domain errors.

    Subclasses customise the HTTP response through:
    - http_status_code: HTTP status code (default 400)
    - error_code: error code string (default "DOMAIN_ERROR")
    """

    http_status_code: int = status.HTTP_400_BAD_REQUEST
    error_code: str = "DOMAIN_ERROR"

    def __init__(self, message: str = "A domain error occurred"):
        self.message = message
        super().__init__(self.message)


class EntityNotFoundError(DomainException):
    """Raised when an entity is not found."""

    http_status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"

    def __init__(self, entity_type: str, entity_id: str | None = None):
        message = f"{entity_type} not found"
        if entity_id:
            message = f"{entity_type} with id '{entity_id}' not found"
        super().__init__(message)


class ValidationError(DomainException):
    """Raised when validation fails."""

    http_status_code = status.HTTP_400_BAD_REQUEST
    error_code = "VALIDATION_ERROR"
