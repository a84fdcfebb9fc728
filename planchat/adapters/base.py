"""Abstract base class for agent API backends.

The relay only needs two calls from the remote agent service; swap the
HTTP implementation for another transport by implementing this interface.
"""

from abc import ABC, abstractmethod
from typing import Any

from planchat.schemas.relay import RelayResponse


class AgentBackendAdapter(ABC):
    """Contract the relay forwards to."""

    @abstractmethod
    async def create_session(self, user_id: str, session_id: str) -> RelayResponse:
        """Register *session_id* for *user_id* with the agent service."""

    @abstractmethod
    async def run(self, payload: dict[str, Any]) -> RelayResponse:
        """Deliver a new user message and return the agent's event list."""
