"""planchat: chat client and relay for a remote planning agent."""

__version__ = "0.1.0"
