"""Relay service: validate client requests and forward them to the agent API."""

from __future__ import annotations

import json
import logging
from typing import Any, assert_never

from pydantic import ValidationError

from planchat.adapters.base import AgentBackendAdapter
from planchat.errors import (
    ConfigurationError,
    GENERIC_PROXY_ERROR,
    InvalidRequestError,
    RelayError,
)
from planchat.schemas.relay import (
    REQUEST_TYPES,
    InitializeSession,
    RelayResponse,
    SendMessage,
    relay_request_adapter,
)

logger = logging.getLogger(__name__)

_MISSING_FIELDS = {
    "initializeSession": "Missing userId or sessionId for session initialization.",
    "sendMessage": "Missing required fields for sending message.",
}


def parse_request(payload: Any) -> InitializeSession | SendMessage:
    """Turn a decoded JSON body into one of the two request variants.

    Raises InvalidRequestError for unknown tags and incomplete variants.
    """
    if not isinstance(payload, dict):
        raise InvalidRequestError("Malformed request body.")

    request_type = payload.get("type")
    if request_type not in REQUEST_TYPES:
        raise InvalidRequestError("Invalid request type provided.")

    try:
        return relay_request_adapter.validate_python(payload)
    except ValidationError as exc:
        logger.info("Rejected %s request: %d validation error(s)", request_type, exc.error_count())
        raise InvalidRequestError(_MISSING_FIELDS[request_type]) from exc


async def dispatch(
    request: InitializeSession | SendMessage, backend: AgentBackendAdapter
) -> RelayResponse:
    match request:
        case InitializeSession():
            return await backend.create_session(request.user_id, request.session_id)
        case SendMessage():
            return await backend.run(request.upstream_payload())
        case _:
            assert_never(request)


async def handle(body: bytes | str, backend: AgentBackendAdapter | None) -> RelayResponse:
    """Single relay entry point. Never raises; every outcome is a RelayResponse."""
    try:
        if backend is None:
            raise ConfigurationError("Server configuration error: API base URL is missing.")

        try:
            payload = json.loads(body) if body else None
        except ValueError as exc:
            raise InvalidRequestError("Malformed request body.") from exc

        request = parse_request(payload)
        return await dispatch(request, backend)

    except ConfigurationError as exc:
        logger.error("EXTERNAL_API_BASE_URL is not configured")
        return exc.to_response()
    except RelayError as exc:
        if exc.status_code >= 500:
            logger.error("Relay failed: %s", exc.message)
        return exc.to_response()
    except Exception:
        logger.exception("Error in proxy route handler")
        return RelayResponse(status_code=500, body={"error": GENERIC_PROXY_ERROR})
