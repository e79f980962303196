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


class StoreFailure(AppError):
    """The relational store rejected or failed to execute an operation.

    Raised for connectivity problems and constraint violations alike.
    Never retried internally.
    """
