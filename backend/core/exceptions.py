"""
Domain exceptions raised by the service layer.

Each exception carries the HTTP status the API layer renders it with, so
services never import FastAPI.
"""


class DomainError(Exception):
    """Base exception for domain rule violations."""

    status_code: int = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(DomainError):
    """Referenced entity does not exist."""

    status_code = 404


class ForbiddenError(DomainError):
    """Requester is authenticated but not allowed to act on the entity."""

    status_code = 403


class ConflictError(DomainError):
    """Operation collides with existing state (duplicate like, already a creator)."""

    status_code = 409


class InvalidOperationError(ConflictError):
    """Operation is structurally disallowed, e.g. subscribing to yourself."""


class InvalidInputError(DomainError):
    """Input failed a domain-level validation (empty comment, amount out of range)."""

    status_code = 400
