from __future__ import annotations


class AppError(Exception):
    """Base application error."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(detail)


class NotFoundError(AppError):
    pass


class ForbiddenError(AppError):
    pass


class ValidationError(AppError):
    pass


class PersistenceError(AppError):
    """A store call failed; nothing it attempted may be assumed applied."""


class TransportError(AppError):
    """Writing to a live connection failed; the connection is considered dead."""
