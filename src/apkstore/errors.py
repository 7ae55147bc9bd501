"""
Exception types shared by the storefront services.

Route handlers catch these and turn them into a notification banner,
an inline form error or the not-found page.
"""

from __future__ import annotations


class StoreError(RuntimeError):
    """Base class for errors raised by APK Store services."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AuthError(StoreError):
    """Sign-in or sign-up was refused."""


class NotFoundError(StoreError):
    """A requested row does not exist."""


class ValidationFailed(StoreError):
    """
    Form input was rejected before anything was written.

    Attributes:
        errors: field name -> human-readable message.
    """

    def __init__(self, errors: dict[str, str], message: str = "Please fix the errors in the form") -> None:
        super().__init__(message)
        self.errors = errors
