"""Session state machine sequencing detection, capture, request and playback."""

import time
import logging
from typing import Callable, Optional

from ..codec.envelope import WireCodec, DEFAULT_SENTINEL
from ..errors import CodecError, RequestInFlight
from ..models.audio import SampleBuffer, VoiceLevel
from ..models.events import ReplyReceived, RequestFailed
from ..models.session import SessionState
from ..network.dispatcher import Dispatcher

logger = logging.getLogger(__name__)


class SessionStateMachine:
    """Drives Idle -> Listen -> Talk -> (Cooldown) -> Idle on the control thread.

    Only Idle reacts to voice activity, so at most one capture/request/playback
    cycle exists at a time. Every failure path ends in Idle with detection
    re-armed; nothing is retried automatically.
    """

    def __init__(self,
                 monitor,
                 extractor,
                 codec: WireCodec,
                 client,
                 dispatcher: Dispatcher,
                 sink,
                 device,
                 capture_delay: float = 0.0,
                 snippet_seconds: float = 3.0,
                 cooldown_seconds: float = 0.0,
                 request_mode: str = "envelope",
                 sentinel: str = DEFAULT_SENTINEL,
                 on_state_change: Optional[Callable[[SessionState, SessionState], None]] = None,
                 clock: Callable[[], float] = time.monotonic):
        """Initialize the state machine.

        Args:
            monitor: AudioMonitor producing a VoiceLevel per tick
            extractor: SnippetExtractor over the capture ring
            codec: WireCodec for outbound snippets and reply audio
            client: NetworkClient owning the request slot
            dispatcher: Queue of network results drained each tick
            sink: Avatar sink receiving triggers and clips
            device: Capture device supplying the write cursor
            capture_delay: Seconds between entering Listen and extracting the snippet
            snippet_seconds: Length of the extracted snippet
            cooldown_seconds: Quiet period after playback before detection re-arms
            request_mode: "envelope" to upload the snippet, "sentinel" to send a plain trigger string
            sentinel: Frame sent in sentinel mode
            on_state_change: Called with (previous, current) on every transition
            clock: Monotonic time source
        """
        if request_mode not in ("envelope", "sentinel"):
            raise ValueError(f"Unknown request mode: {request_mode}")
        self.monitor = monitor
        self.extractor = extractor
        self.codec = codec
        self.client = client
        self.dispatcher = dispatcher
        self.sink = sink
        self.device = device
        self.capture_delay = capture_delay
        self.snippet_seconds = snippet_seconds
        self.cooldown_seconds = cooldown_seconds
        self.request_mode = request_mode
        self.sentinel = sentinel
        self.on_state_change = on_state_change
        self.clock = clock

        self.state = SessionState.IDLE
        self.capture_at: Optional[float] = None
        self.awaiting_request_id: Optional[int] = None
        self.talk_until: Optional[float] = None
        self.cooldown_until: Optional[float] = None
        self.last_level: Optional[VoiceLevel] = None

        # Statistics tracking
        self.cycles_started = 0
        self.cycles_completed = 0
        self.cycles_failed = 0

    def tick(self, now: Optional[float] = None) -> SessionState:
        """Run one control-thread step: drain replies, advance timers, check for voice."""
        if now is None:
            now = self.clock()

        self.dispatcher.drain(lambda message: self._on_message(message, now))
        self._advance_timers(now)

        level = self.monitor.tick()
        self.last_level = level
        if level.voice_present:
            self.on_voice_detected(now)

        return self.state

    def on_voice_detected(self, now: float) -> bool:
        """Begin a Listen cycle if, and only if, the session is Idle.

        Returns:
            True if a cycle was started
        """
        if self.state != SessionState.IDLE:
            return False
        if not self.client.is_idle():
            logger.warning("Voice detected while a request is still pending, ignoring")
            return False

        self.cycles_started += 1
        logger.info(f"Voice detected, starting cycle {self.cycles_started}")
        self._set_state(SessionState.LISTEN)
        self.sink.trigger(SessionState.LISTEN.value)
        self.capture_at = now + self.capture_delay
        if self.capture_delay <= 0:
            self._capture_and_send(now)
        return True

    def _advance_timers(self, now: float) -> None:
        if self.state == SessionState.LISTEN:
            if self.capture_at is not None and now >= self.capture_at:
                self._capture_and_send(now)

        elif self.state == SessionState.TALK:
            if self.talk_until is None or now >= self.talk_until:
                self._finish_talk(now)

        elif self.state == SessionState.COOLDOWN:
            if self.cooldown_until is None or now >= self.cooldown_until:
                self.cooldown_until = None
                self._set_state(SessionState.IDLE)

    def _capture_and_send(self, now: float) -> None:
        self.capture_at = None
        try:
            if self.request_mode == "sentinel":
                request = self.sentinel
            else:
                request = self.codec.encode(self._extract_snippet())
            self.awaiting_request_id = self.client.send(request)
        except RequestInFlight as e:
            logger.error(f"Dropping request: {e}")
            self._fail_cycle()
        except (CodecError, ValueError) as e:
            logger.error(f"Could not prepare request: {e}")
            self._fail_cycle()
        else:
            logger.debug(f"Request {self.awaiting_request_id} sent, awaiting reply")

    def _extract_snippet(self) -> SampleBuffer:
        cursor = self.device.get_cursor()
        return self.extractor.extract(cursor, self.snippet_seconds)

    def _on_message(self, message, now: float) -> None:
        request_id = getattr(message, 'request_id', None)
        if self.state != SessionState.LISTEN or request_id != self.awaiting_request_id:
            logger.warning(f"Dropping {type(message).__name__} for request {request_id} "
                           f"(state={self.state.value}, awaiting={self.awaiting_request_id})")
            return
        self.awaiting_request_id = None

        if isinstance(message, RequestFailed):
            logger.error(f"Request {request_id} failed: {message.error}")
            self._fail_cycle()
            return

        if not isinstance(message, ReplyReceived):
            logger.error(f"Unknown dispatcher message: {message!r}")
            self._fail_cycle()
            return

        reply = message.reply
        if not reply.has_audio:
            logger.info(f"Reply to request {request_id} carries no audio "
                        f"(state={reply.state}, status={reply.status}), returning to Idle")
            self._fail_cycle()
            return

        try:
            buffer = self.codec.reply_audio(reply)
        except (CodecError, ValueError) as e:
            logger.error(f"Reply audio could not be decoded: {e}")
            self._fail_cycle()
            return

        if buffer is None or len(buffer) == 0:
            logger.info("Reply audio is empty, returning to Idle")
            self._fail_cycle()
            return

        self._begin_talk(reply.gesture, buffer, now)

    def _begin_talk(self, gesture: Optional[str], buffer: SampleBuffer, now: float) -> None:
        self._set_state(SessionState.TALK)
        self.sink.trigger(gesture or SessionState.TALK.value)
        try:
            duration = self.sink.play(buffer)
        except Exception as e:
            logger.error(f"Reply playback failed: {e}", exc_info=True)
            self._fail_cycle()
            return

        self.talk_until = now + duration
        logger.info(f"Playing {duration:.2f}s reply with gesture {gesture or SessionState.TALK.value}")

    def _finish_talk(self, now: float) -> None:
        self.talk_until = None
        self.cycles_completed += 1
        self.sink.trigger(SessionState.IDLE.value)
        if self.cooldown_seconds > 0:
            self.cooldown_until = now + self.cooldown_seconds
            self._set_state(SessionState.COOLDOWN)
        else:
            self._set_state(SessionState.IDLE)

    def _fail_cycle(self) -> None:
        self.cycles_failed += 1
        self._return_to_idle()

    def _return_to_idle(self) -> None:
        self.capture_at = None
        self.awaiting_request_id = None
        self.talk_until = None
        self.cooldown_until = None
        self.sink.trigger(SessionState.IDLE.value)
        self._set_state(SessionState.IDLE)

    def reset(self) -> None:
        """Force the session back to Idle."""
        if self.state != SessionState.IDLE:
            self._return_to_idle()

    def _set_state(self, new_state: SessionState) -> None:
        previous = self.state
        if new_state == previous:
            return
        self.state = new_state
        logger.info(f"Session state: {previous.value} -> {new_state.value}")
        if self.on_state_change:
            self.on_state_change(previous, new_state)
