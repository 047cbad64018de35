"""Domain error taxonomy.

Services raise these; the global exception handlers map each one to its HTTP
status with an ``{"error": message}`` body.
"""

from __future__ import annotations


class EdugramError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(EdugramError):
    """Missing or malformed input."""

    status_code = 400


class Unauthorized(EdugramError):
    """Missing or invalid credential."""

    status_code = 401


class Forbidden(EdugramError):
    """Caller is authenticated but not allowed to do this."""

    status_code = 403


class NotFound(EdugramError):
    """Referenced entity does not exist."""

    status_code = 404


class DuplicateUser(EdugramError):
    status_code = 409


class UpstreamFailure(EdugramError):
    """Storage or identity backend failed."""

    status_code = 500
