"""Typed failures raised by the core and mapped to HTTP responses in `quoteforge.main`."""

from __future__ import annotations

from typing import Any


class QuoteForgeError(Exception):
    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"ok": False, "error": self.message}


class NotFoundError(QuoteForgeError):
    status_code = 404


class InvalidTransitionError(QuoteForgeError):
    status_code = 409


class ValidationFailedError(QuoteForgeError):
    status_code = 422

    def __init__(self, message: str, errors: list[str]) -> None:
        super().__init__(message)
        self.errors = list(errors)

    def to_dict(self) -> dict[str, Any]:
        return {"ok": False, "error": self.message, "errors": self.errors}


class AllocationError(QuoteForgeError):
    """The sequence counter could not be incremented; the quote stays a draft."""

    status_code = 503


class ForbiddenError(QuoteForgeError):
    status_code = 403
