"""
Application error taxonomy.

Services raise these; `main.py` maps them to HTTP responses. Errors raised
while recording activity are never mapped: the activity middleware logs and
drops them.
"""

from __future__ import annotations


class AppError(RuntimeError):
    status_code = 500
    default_message = "Internal server error."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class Conflict(AppError):
    status_code = 409
    default_message = "Resource already exists."


class InvalidCredentials(AppError):
    status_code = 401
    default_message = "Invalid credentials"


class NotFound(AppError):
    status_code = 404
    default_message = "Resource not found."


class StorageError(AppError):
    status_code = 503
    default_message = "Storage is unavailable."


class ClassificationSkip(Exception):
    """
    Not an error: raised inside the activity middleware when a request is
    deliberately left unrecorded (missing bearer header, unattributable token).
    """
