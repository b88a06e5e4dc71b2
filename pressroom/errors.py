"""Error taxonomy for the search and analysis pipeline.

Provider-level errors (``ConfigurationError``, ``ProviderError``,
``TransportError``) are non-fatal: the search orchestrator catches them and
moves on to the next provider. Everything else is fatal to the request and
carries the HTTP status used by the API exception handler.
"""
from __future__ import annotations

from typing import Any


class PressroomError(Exception):
    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.message}


class ProviderUnavailable(PressroomError):
    """A search provider could not produce results. Triggers fallback."""

    status_code = 502

    def __init__(self, provider: str, message: str):
        self.provider = provider
        super().__init__(f"{provider}: {message}")


class ConfigurationError(ProviderUnavailable):
    """Provider credentials are missing."""


class ProviderError(ProviderUnavailable):
    """Provider answered with a non-2xx status."""

    def __init__(self, provider: str, status_code: int, message: str = ""):
        self.http_status = status_code
        super().__init__(provider, message or f"HTTP {status_code}")


class TransportError(ProviderUnavailable):
    """Network failure or timeout talking to a provider."""


class QuotaExceededError(PressroomError):
    status_code = 429

    def __init__(self, kind: str, limit: int):
        self.kind = kind
        self.limit = limit
        label = "Search" if kind == "searches" else "Export"
        super().__init__(f"{label} limit reached")

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.message, "limit": self.limit}


class UnauthorizedError(PressroomError):
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class ValidationError(PressroomError):
    status_code = 422

    def __init__(self, message: str, errors: list[str] | None = None):
        self.errors = errors or [message]
        super().__init__(message)

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.message, "details": self.errors}


class NotFoundError(PressroomError):
    status_code = 404


class AnalysisError(PressroomError):
    """Scoring one result failed. Never aborts an enrichment batch."""
