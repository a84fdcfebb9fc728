"""Relay error taxonomy.

Every error carries the HTTP status it maps to and a message that is safe to
show to the caller. Nothing here ever wraps a raw upstream traceback.
"""

from __future__ import annotations

from typing import Any

GENERIC_PROXY_ERROR = "An unexpected error occurred in the proxy."


class RelayError(Exception):
    """Base class for everything that ends a relay request early."""

    status_code: int = 500

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_response(self) -> "RelayResponse":
        from planchat.schemas.relay import RelayResponse

        return RelayResponse(status_code=self.status_code, body={"error": self.message})


class ConfigurationError(RelayError):
    """Relay is misconfigured (e.g. no upstream base URL)."""

    status_code = 500


class InvalidRequestError(RelayError):
    """Request body is malformed, has an unknown type, or misses fields."""

    status_code = 400


class TransportError(RelayError):
    """Network or decoding failure while talking to the upstream API."""

    status_code = 500

    def __init__(self, message: str = GENERIC_PROXY_ERROR) -> None:
        super().__init__(message)


class UpstreamError(RelayError):
    """The relay (or the agent API behind it) answered with a non-success status."""

    def __init__(self, message: str, *, status_code: int, body: Any = None) -> None:
        super().__init__(message, status_code=status_code)
        self.body = body
