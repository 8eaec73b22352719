"""Network client running request/reply cycles on a dedicated worker thread."""

import time
import queue
import logging
import threading
from typing import Optional, NamedTuple

from ..errors import RequestInFlight
from ..models.events import ReplyReceived, RequestFailed
from ..models.session import ClientState
from ..codec.envelope import WireCodec
from .dispatcher import Dispatcher

logger = logging.getLogger(__name__)


class OutboundRequest(NamedTuple):
    """A frame waiting for the worker to send it."""
    request_id: int
    frame: str
    submitted_at: float


class NetworkClient:
    """Owns the single outbound request slot to the inference service.

    ``send()`` is called from the control thread and never blocks. The worker
    thread performs the blocking send/receive and hands the outcome to the
    Dispatcher. At most one request is in flight at any time.
    """

    def __init__(self, transport, dispatcher: Dispatcher, poll_interval: float = 0.02):
        """Initialize network client.

        Args:
            transport: Object with ``request(frame) -> str`` and ``close()``
            dispatcher: Destination for ReplyReceived / RequestFailed messages
            poll_interval: How often the idle worker re-checks the running flag
        """
        self.transport = transport
        self.dispatcher = dispatcher
        self.poll_interval = poll_interval

        self._state = ClientState.IDLE
        self._state_lock = threading.Lock()
        self._outbound = queue.Queue(maxsize=1)
        self._next_request_id = 0
        self.pending_request_id: Optional[int] = None

        self.worker_thread: Optional[threading.Thread] = None
        self.running = threading.Event()

        # Statistics tracking
        self.requests_sent = 0
        self.replies_received = 0
        self.requests_failed = 0

    @property
    def state(self) -> ClientState:
        with self._state_lock:
            return self._state

    def is_idle(self) -> bool:
        return self.state == ClientState.IDLE

    def start(self) -> None:
        """Start the worker thread."""
        if self.running.is_set():
            logger.warning("Network client already running")
            return
        self.running.set()
        self.worker_thread = threading.Thread(target=self._worker_loop, daemon=True)
        self.worker_thread.name = "NetworkWorkerThread"
        self.worker_thread.start()
        logger.info("Network client started")

    def send(self, request) -> int:
        """Queue a request for the worker.

        Args:
            request: AudioEnvelope or sentinel string

        Returns:
            Identifier echoed back on the matching Dispatcher message

        Raises:
            RequestInFlight: a previous request has not completed yet
        """
        frame = WireCodec.encode_request(request)
        with self._state_lock:
            if self._state != ClientState.IDLE:
                raise RequestInFlight(
                    f"Request {self.pending_request_id} is still awaiting its reply")
            self._next_request_id += 1
            request_id = self._next_request_id
            self._state = ClientState.AWAITING_REPLY
            self.pending_request_id = request_id

        self._outbound.put_nowait(OutboundRequest(request_id, frame, time.monotonic()))
        logger.debug(f"Queued request {request_id} ({len(frame)} chars)")
        return request_id

    def _worker_loop(self) -> None:
        """Main loop of the network worker."""
        logger.debug("Network worker starting")
        try:
            while self.running.is_set():
                try:
                    request = self._outbound.get(timeout=self.poll_interval)
                except queue.Empty:
                    continue
                self._process(request)
        finally:
            try:
                self.transport.close()
            except Exception as e:
                logger.warning(f"Error closing transport: {e}")
            logger.debug("Network worker exiting")

    def _process(self, request: OutboundRequest) -> None:
        self.requests_sent += 1
        try:
            raw = self.transport.request(request.frame)
            reply = WireCodec.parse_reply(raw)
        except Exception as e:
            elapsed = time.monotonic() - request.submitted_at
            logger.error(f"Request {request.request_id} failed after {elapsed:.1f}s: "
                         f"{type(e).__name__}: {e}")
            self.requests_failed += 1
            message = RequestFailed(request_id=request.request_id, error=e)
        else:
            elapsed = time.monotonic() - request.submitted_at
            logger.info(f"Reply to request {request.request_id} after {elapsed:.2f}s "
                        f"(gesture={reply.gesture}, audio={'yes' if reply.has_audio else 'no'})")
            self.replies_received += 1
            message = ReplyReceived(request_id=request.request_id, reply=reply, raw=raw)

        # Free the slot first so the control thread may send as soon as it sees the result
        self._mark_idle()
        self.dispatcher.enqueue(message)

    def _mark_idle(self) -> None:
        with self._state_lock:
            self._state = ClientState.IDLE
            self.pending_request_id = None

    def stop(self, timeout: float = 1.0) -> bool:
        """Signal the worker to exit and wait up to ``timeout`` seconds.

        An in-flight request is not cancelled; its result is discarded.

        Returns:
            True if the worker exited within the timeout
        """
        if not self.running.is_set():
            return True
        logger.info("Stopping network client")
        self.running.clear()
        if self.worker_thread and self.worker_thread.is_alive():
            self.worker_thread.join(timeout)
            if self.worker_thread.is_alive():
                logger.warning("Network worker did not stop cleanly")
                return False
        logger.info(f"Network client stopped. Sent: {self.requests_sent}, "
                    f"replies: {self.replies_received}, failed: {self.requests_failed}")
        return True
