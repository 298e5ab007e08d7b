"""
Base domain exceptions.
"""

from typing import Any, Optional


class CoffreException(Exception):
    """Base exception for all Coffre domain errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class EntityNotFoundError(CoffreException):
    """Raised when entity is not found in repository."""

    def __init__(self, entity_type: str, entity_id: str):
        message = f"{entity_type} with ID {entity_id} not found"
        super().__init__(message, code="ENTITY_NOT_FOUND")


class DuplicateEntityError(CoffreException):
    """Raised when attempting to create duplicate entity."""

    def __init__(self, entity_type: str, identifier: str):
        message = f"{entity_type} with {identifier} already exists"
        super().__init__(message, code="DUPLICATE_ENTITY")


class ValidationError(CoffreException):
    """Raised when entity validation fails."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        message = f"Validation failed for {field}: {reason}"
        super().__init__(message, code="VALIDATION_ERROR", details={"field": field})


class AccessDeniedError(CoffreException):
    """Raised when a caller touches a resource owned by another wallet."""

    def __init__(self, resource: str):
        super().__init__(
            f"Access denied to {resource}",
            code="ACCESS_DENIED",
        )
