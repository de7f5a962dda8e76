"""
Error types of the FormAI API.

Services raise these (usually through the ``raise_*`` helpers) and the
handler registered in ``formai.main`` turns them into ``{"detail": ...}``
JSON responses with the matching status code.
"""
from typing import Optional, NoReturn

from fastapi import status


class FormAIException(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    headers: Optional[dict] = None

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(message)


class BadRequestError(FormAIException):
    pass


class NotFoundError(FormAIException):
    """Missing rows and rows of another tenant alike."""
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str = "Resource", resource_id: Optional[str] = None):
        where = f" with ID '{resource_id}'" if resource_id else ""
        super().__init__(f"{resource}{where} not found")


class AlreadyExistsError(FormAIException):
    def __init__(self, resource: str = "Resource", field: Optional[str] = None, value: Optional[str] = None):
        where = f" with {field} '{value}'" if field and value else ""
        super().__init__(f"{resource}{where} already exists")


class UnauthorizedError(FormAIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    headers = {"WWW-Authenticate": "Bearer"}

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(message)


class ForbiddenError(FormAIException):
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "You don't have permission to access this resource"):
        super().__init__(message)


class ConflictError(FormAIException):
    status_code = status.HTTP_409_CONFLICT


class ValidationError(FormAIException):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, message: str = "Validation failed", field: Optional[str] = None):
        if field:
            message = f"Invalid value for '{field}': {message}"
        super().__init__(message)


class ExternalServiceError(FormAIException):
    """An AI provider or other upstream call failed where no fallback applies."""
    status_code = status.HTTP_502_BAD_GATEWAY

    def __init__(self, service: str = "External service", message: Optional[str] = None):
        super().__init__(f"{service} call failed: {message}" if message else f"{service} call failed")


def raise_not_found(resource: str = "Resource", resource_id: Optional[str] = None) -> NoReturn:
    raise NotFoundError(resource, resource_id)


def raise_already_exists(resource: str = "Resource", field: Optional[str] = None, value: Optional[str] = None) -> NoReturn:
    raise AlreadyExistsError(resource, field, value)


def raise_bad_request(message: str) -> NoReturn:
    raise BadRequestError(message)


def raise_unauthorized(message: str = "Could not validate credentials") -> NoReturn:
    raise UnauthorizedError(message)


def raise_forbidden(message: str = "You don't have permission to access this resource") -> NoReturn:
    raise ForbiddenError(message)


def raise_conflict(message: str) -> NoReturn:
    raise ConflictError(message)


def raise_validation_error(message: str = "Validation failed", field: Optional[str] = None) -> NoReturn:
    raise ValidationError(message, field)
