from planchat.schemas.message import AgentEvent, Message, MessagePart
from planchat.schemas.relay import InitializeSession, RelayRequest, RelayResponse, SendMessage

__all__ = [
    "AgentEvent",
    "InitializeSession",
    "Message",
    "MessagePart",
    "RelayRequest",
    "RelayResponse",
    "SendMessage",
]
