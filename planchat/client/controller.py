"""Conversation controller: one in-flight send at a time."""

from __future__ import annotations

import logging
from enum import StrEnum

from planchat.client.relay_client import safe_reason
from planchat.config import settings
from planchat.errors import UpstreamError
from planchat.schemas.message import Message
from planchat.services.projector import project

logger = logging.getLogger(__name__)

SEND_ERROR_PREFIX = "An error occurred while sending the message: "


class ConversationState(StrEnum):
    IDLE = "idle"
    SENDING = "sending"
    FAILED = "failed"  # last send failed; accepts new input like IDLE


class ConversationController:
    """Owns the message list for one conversation.

    ``submit`` appends the user's message right away, relays it, then appends
    whatever assistant replies come back. A failure becomes a visible model
    message; nothing already in the history is ever removed.
    """

    def __init__(
        self,
        relay,
        session_id: str,
        *,
        user_id: str | None = None,
        app_name: str | None = None,
        assistant_author: str | None = None,
    ) -> None:
        self.relay = relay
        self.session_id = session_id
        self.user_id = user_id or settings.user_id
        self.app_name = app_name or settings.app_name
        self.assistant_author = assistant_author or settings.assistant_author
        self.messages: list[Message] = []
        self.state = ConversationState.IDLE

    @property
    def is_pending(self) -> bool:
        return self.state is ConversationState.SENDING

    def accepts_input(self) -> bool:
        return self.state in (ConversationState.IDLE, ConversationState.FAILED)

    async def submit(self, text: str) -> None:
        if not text.strip():
            return
        if not self.accepts_input():
            logger.debug("Dropped submission while %s", self.state)
            return

        user_message = Message.user(text)
        self.messages.append(user_message)
        self.state = ConversationState.SENDING

        failed = False
        try:
            events = await self.relay.send_message(
                self.app_name, self.user_id, self.session_id, user_message
            )
            self.messages.extend(project(events, self.assistant_author))
        except UpstreamError as exc:
            failed = True
            logger.error("Error sending message (%d): %s", exc.status_code, exc.message)
            self.messages.append(Message.model(SEND_ERROR_PREFIX + exc.message))
        except Exception as exc:
            failed = True
            logger.error("Error sending message: %r", exc)
            self.messages.append(Message.model(SEND_ERROR_PREFIX + safe_reason(exc)))
        finally:
            self.state = ConversationState.FAILED if failed else ConversationState.IDLE
