from planchat.client.controller import ConversationController, ConversationState
from planchat.client.relay_client import RelayClient
from planchat.client.session import CookieFileStore, KeyValueStore, MemoryStore, SessionIdentityManager

__all__ = [
    "ConversationController",
    "ConversationState",
    "CookieFileStore",
    "KeyValueStore",
    "MemoryStore",
    "RelayClient",
    "SessionIdentityManager",
]
