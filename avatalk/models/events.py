"""Messages handed from the network worker to the control thread."""

from dataclasses import dataclass, field
from datetime import datetime

from .envelope import ServerReply


@dataclass
class ReplyReceived:
    """The service answered a request."""
    request_id: int
    reply: ServerReply
    raw: str = ""
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class RequestFailed:
    """A request ended without a usable reply (timeout, transport error)."""
    request_id: int
    error: Exception
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class StateChangeEvent:
    """Session state transition, published for status displays."""
    previous: str
    current: str
    timestamp: datetime = field(default_factory=datetime.now)
