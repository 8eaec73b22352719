"""Session and client state models."""

from enum import Enum


class SessionState(Enum):
    """Avatar session states. Values double as the animation trigger names."""
    IDLE = "Idle"
    LISTEN = "Listen"
    TALK = "Talk"
    COOLDOWN = "Cooldown"


class ClientState(Enum):
    """NetworkClient request slot state."""
    IDLE = "idle"
    AWAITING_REPLY = "awaiting_reply"
