"""Relay endpoint: a single JSON route forwarding to the agent API."""

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response

from planchat.adapters.agent_api import AgentApiAdapter
from planchat.config import settings
from planchat.services import relay_service

router = APIRouter()


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


def get_backend(
    client: httpx.AsyncClient = Depends(get_http_client),
) -> AgentApiAdapter | None:
    """Build the upstream adapter, or None when the base URL is not configured."""
    base_url = settings.upstream_base_url
    if not base_url:
        return None
    return AgentApiAdapter(base_url, settings.app_name, client)


@router.post("")
async def proxy(request: Request, backend: AgentApiAdapter | None = Depends(get_backend)):
    """Relay a client request.

    Client sends one of:
      {"type": "initializeSession", "userId": "...", "sessionId": "..."}
      {"type": "sendMessage", "app_name": "...", "user_id": "...",
       "session_id": "...", "new_message": {...}}

    The upstream status and JSON body come back unchanged; relay-local
    failures come back as {"error": "..."}.
    """
    body = await request.body()
    result = await relay_service.handle(body, backend)
    if result.body is None:
        # upstream success without content (e.g. 204)
        return Response(status_code=result.status_code)
    return JSONResponse(result.body, status_code=result.status_code)
