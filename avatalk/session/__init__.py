"""Session sequencing layer for the avatar client."""

from .state_machine import SessionStateMachine
from .sink import AbstractAvatarSink, PubSubAvatarSink
from .publisher import StatePublisher

__all__ = [
    "SessionStateMachine",
    "AbstractAvatarSink",
    "PubSubAvatarSink",
    "StatePublisher",
]
