"""Network transport, client worker and dispatcher module."""

from .dispatcher import Dispatcher
from .transport import ZmqTransport
from .client import NetworkClient

__all__ = [
    'Dispatcher',
    'ZmqTransport',
    'NetworkClient',
]
