"""Conversation message and upstream agent event schemas."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict


class MessagePart(BaseModel):
    """One fragment of a message. Extra upstream keys are kept as-is."""

    model_config = ConfigDict(extra="allow", frozen=True)

    text: str | None = None


class Message(BaseModel):
    """A single conversation turn, immutable once appended."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "model"]
    parts: tuple[MessagePart, ...] = ()

    @classmethod
    def user(cls, text: str) -> "Message":
        return cls(role="user", parts=[MessagePart(text=text)])

    @classmethod
    def model(cls, text: str) -> "Message":
        return cls(role="model", parts=[MessagePart(text=text)])

    @property
    def text(self) -> str:
        """Concatenated text of all parts, in order."""
        return "".join(p.text or "" for p in self.parts)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class EventContent(BaseModel):
    model_config = ConfigDict(extra="allow")

    parts: list[dict[str, Any]] | None = None


class AgentEvent(BaseModel):
    """One upstream event from ``POST /run``.

    Only ``author`` and ``content.parts`` are consumed; everything else
    (``id``, ``invocationId``, ``timestamp``, ``actions``, ``usageMetadata``)
    is opaque and may change without notice.
    """

    model_config = ConfigDict(extra="allow")

    author: str | None = None
    content: EventContent | None = None

