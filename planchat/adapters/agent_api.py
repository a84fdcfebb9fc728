"""HTTP adapter for the external planning-agent API.

Implements the two upstream calls the relay makes:
  - POST {base}/apps/{app}/users/{user}/sessions/{session}  (empty body)
  - POST {base}/run                                         (JSON body)

Upstream status codes and bodies pass through untouched, and a success
without content is relayed without a body. A non-success body that is not
JSON becomes ``{}`` so the caller always gets a JSON envelope.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from planchat.adapters.base import AgentBackendAdapter
from planchat.errors import TransportError
from planchat.schemas.relay import RelayResponse

logger = logging.getLogger(__name__)

_JSON_HEADERS = {"Content-Type": "application/json"}


class AgentApiAdapter(AgentBackendAdapter):
    """Thin httpx client for one agent API deployment."""

    def __init__(self, base_url: str, app_name: str, client: httpx.AsyncClient) -> None:
        self.base_url = base_url.rstrip("/")
        self.app_name = app_name
        self._client = client

    def session_url(self, user_id: str, session_id: str) -> str:
        return (
            f"{self.base_url}/apps/{quote(self.app_name, safe='')}"
            f"/users/{quote(user_id, safe='')}/sessions/{quote(session_id, safe='')}"
        )

    @property
    def run_url(self) -> str:
        return f"{self.base_url}/run"

    async def create_session(self, user_id: str, session_id: str) -> RelayResponse:
        url = self.session_url(user_id, session_id)
        logger.info("Initializing upstream session %s for user %s", session_id, user_id)
        resp = await self._post(url)
        return self._relay(resp, "session init")

    async def run(self, payload: dict[str, Any]) -> RelayResponse:
        logger.debug("Forwarding message for session %s", payload.get("session_id"))
        resp = await self._post(self.run_url, json=payload)
        return self._relay(resp, "run")

    # ── Helpers ──────────────────────────────────────────────────────

    async def _post(self, url: str, json: dict[str, Any] | None = None) -> httpx.Response:
        try:
            return await self._client.post(url, json=json, headers=_JSON_HEADERS)
        except httpx.HTTPError as exc:
            logger.error("Upstream request to %s failed: %r", url, exc)
            raise TransportError() from exc

    @staticmethod
    def _relay(resp: httpx.Response, what: str) -> RelayResponse:
        if not resp.is_success:
            try:
                error_data = resp.json()
            except ValueError:
                error_data = {}
            logger.error("External API %s failed: %s %s", what, resp.status_code, error_data)
            return RelayResponse(status_code=resp.status_code, body=error_data)

        if not resp.content:
            return RelayResponse(status_code=resp.status_code, body=None)
        try:
            data = resp.json()
        except ValueError as exc:
            logger.error("External API %s returned a non-JSON body", what)
            raise TransportError() from exc
        return RelayResponse(status_code=resp.status_code, body=data)
