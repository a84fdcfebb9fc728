"""Event projection: reduce the agent's event list to displayable replies."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from planchat.config import settings
from planchat.schemas.message import AgentEvent, Message, MessagePart

logger = logging.getLogger(__name__)


def _reply_parts(event: Any, author: str) -> list[dict[str, Any]] | None:
    """Return the event's ``content.parts`` if it is a reply from *author*."""
    if not isinstance(event, Mapping):
        return None
    try:
        parsed = AgentEvent.model_validate(dict(event))
    except ValidationError:
        return None
    if parsed.author != author or parsed.content is None or not parsed.content.parts:
        return None
    return parsed.content.parts


def project(events: Iterable[Any] | Any, author: str | None = None) -> list[Message]:
    """Filter agent events down to assistant messages, preserving order.

    Tool calls, metadata events, other authors and empty contents are dropped.
    Parts are carried over unchanged.
    """
    author = author or settings.assistant_author
    if not isinstance(events, Iterable) or isinstance(events, (str, bytes, Mapping)):
        logger.debug("Ignoring non-list event payload of type %s", type(events).__name__)
        return []

    messages: list[Message] = []
    dropped = 0
    for event in events:
        parts = _reply_parts(event, author)
        if parts is None:
            dropped += 1
            continue
        try:
            message = Message(role="model", parts=[MessagePart.model_validate(p) for p in parts])
        except ValidationError:
            dropped += 1
            continue
        messages.append(message)

    if dropped:
        logger.debug("Dropped %d non-reply event(s)", dropped)
    return messages
