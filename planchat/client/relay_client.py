"""HTTP client for the relay endpoint (``POST /api/proxy``)."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from planchat.config import settings
from planchat.errors import UpstreamError
from planchat.schemas.message import Message

logger = logging.getLogger(__name__)

UNKNOWN_SEND_ERROR = "Unknown error during message sending."
UNREADABLE_REPLY = "The relay returned an unreadable response."
UNREACHABLE_RELAY = "Could not reach the relay."
UNEXPECTED_ERROR = "Unexpected client error."


def safe_reason(exc: Exception) -> str:
    """User-facing reason for a client-side failure. Details stay in the logs."""
    if isinstance(exc, UpstreamError):
        return exc.message
    if isinstance(exc, httpx.HTTPError):
        return UNREACHABLE_RELAY
    if isinstance(exc, ValueError):
        return UNREADABLE_REPLY
    return UNEXPECTED_ERROR


def error_reason(resp: httpx.Response) -> str:
    """Best human-readable reason for a failed relay response."""
    try:
        data = resp.json()
    except ValueError:
        return UNKNOWN_SEND_ERROR
    if isinstance(data, dict):
        for key in ("error", "detail"):
            value = data.get(key)
            if isinstance(value, str) and value:
                return value
    return f"API error: {resp.status_code} {resp.reason_phrase}".rstrip()


class RelayClient:
    """Posts the two relay request kinds and decodes the replies.

    A fresh httpx.AsyncClient is opened per call unless one is injected, so
    the client can be reused across event loops (e.g. Streamlit reruns).
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = (base_url or settings.relay_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.upstream_timeout
        self._http = http

    @property
    def url(self) -> str:
        return f"{self.base_url}/api/proxy"

    async def initialize_session(self, user_id: str, session_id: str) -> Any:
        return await self._post(
            {"type": "initializeSession", "userId": user_id, "sessionId": session_id}
        )

    async def send_message(
        self, app_name: str, user_id: str, session_id: str, message: Message
    ) -> Any:
        return await self._post(
            {
                "type": "sendMessage",
                "app_name": app_name,
                "user_id": user_id,
                "session_id": session_id,
                "new_message": message.to_wire(),
            }
        )

    async def _post(self, payload: dict[str, Any]) -> Any:
        if self._http is not None:
            resp = await self._http.post(self.url, json=payload)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as http:
                resp = await http.post(self.url, json=payload)

        if not resp.is_success:
            try:
                body = resp.json()
            except ValueError:
                body = None
            raise UpstreamError(error_reason(resp), status_code=resp.status_code, body=body)
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            raise UpstreamError(UNREADABLE_REPLY, status_code=resp.status_code) from exc
