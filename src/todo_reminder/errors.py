"""
Service-level error taxonomy.

Repositories never raise these; they return None for absent entities and the
service decides whether absence is an error. The HTTP layer maps the
subclasses to status codes in main.create_app.
"""
from __future__ import annotations


class ServiceError(Exception):
    """Base class for errors raised by TodoService."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


# PUBLIC_INTERFACE
class ValidationError(ServiceError):
    """Bad or missing input, e.g. a blank title or an unparseable remind_at."""


# PUBLIC_INTERFACE
class NotFoundError(ServiceError):
    """An unknown user or todo id."""


# PUBLIC_INTERFACE
class InternalConsistencyError(ServiceError):
    """An update failed on an id that was just read successfully."""
