"""ZeroMQ request/reply transport to the inference service."""

import logging
from typing import Optional

import zmq

from ..errors import RequestTimeout, TransportUnreachable

logger = logging.getLogger(__name__)


class ZmqTransport:
    """REQ socket that sends one frame and waits a bounded time for one reply.

    A REQ socket cannot send again until it has received, so after any
    failure the socket is discarded and reopened on the next request.
    """

    def __init__(self, endpoint: str, timeout: float = 20.0, context: Optional[zmq.Context] = None):
        """Initialize transport.

        Args:
            endpoint: ZeroMQ endpoint address, e.g. tcp://localhost:5555
            timeout: Bound on each send and on waiting for the reply, in seconds
            context: ZeroMQ context, defaults to the process-wide instance
        """
        self.endpoint = endpoint
        self.timeout = timeout
        self.context = context or zmq.Context.instance()
        self.socket: Optional[zmq.Socket] = None

    def connect(self) -> None:
        if self.socket is not None:
            return
        timeout_ms = int(self.timeout * 1000)
        socket = self.context.socket(zmq.REQ)
        socket.setsockopt(zmq.LINGER, 0)
        socket.setsockopt(zmq.RCVTIMEO, timeout_ms)
        socket.setsockopt(zmq.SNDTIMEO, timeout_ms)
        # Do not queue frames for peers that are not connected yet
        socket.setsockopt(zmq.IMMEDIATE, 1)
        try:
            socket.connect(self.endpoint)
        except zmq.ZMQError as e:
            socket.close()
            raise TransportUnreachable(f"Cannot connect to {self.endpoint}: {e}") from e
        self.socket = socket
        logger.info(f"Connected REQ socket to {self.endpoint} (timeout {self.timeout}s)")

    def request(self, frame: str) -> str:
        """Send ``frame`` and block until the reply arrives or the timeout passes."""
        self.connect()
        try:
            self.socket.send_string(frame)
        except zmq.Again as e:
            self._reset()
            raise TransportUnreachable(
                f"Send to {self.endpoint} did not complete within {self.timeout}s") from e
        except zmq.ZMQError as e:
            self._reset()
            raise TransportUnreachable(f"Send to {self.endpoint} failed: {e}") from e

        try:
            return self.socket.recv_string()
        except zmq.Again as e:
            self._reset()
            raise RequestTimeout(f"No reply from {self.endpoint} within {self.timeout}s") from e
        except zmq.ZMQError as e:
            self._reset()
            raise TransportUnreachable(f"Receive from {self.endpoint} failed: {e}") from e

    def _reset(self) -> None:
        if self.socket is not None:
            self.socket.close(linger=0)
            self.socket = None
            logger.debug(f"Discarded REQ socket for {self.endpoint}")

    def close(self) -> None:
        self._reset()
