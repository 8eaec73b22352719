"""Main application entry point for Avatalk."""

import sys
import time
import argparse
import logging
from pathlib import Path
from typing import Optional

from avatalk import __version__
from avatalk.audio.audio_pub import LevelPublisher
from avatalk.audio.capture import AudioCapture
from avatalk.audio.monitor import AudioMonitor
from avatalk.audio.playback import AudioPlayer
from avatalk.audio.snippet import SnippetExtractor
from avatalk.codec.envelope import WireCodec, DEFAULT_SENTINEL
from avatalk.errors import CaptureUnavailable
from avatalk.network.client import NetworkClient
from avatalk.network.dispatcher import Dispatcher
from avatalk.network.transport import ZmqTransport
from avatalk.session.publisher import StatePublisher
from avatalk.session.sink import PubSubAvatarSink
from avatalk.session.state_machine import SessionStateMachine

from .config import AvatalkConfig

logger = logging.getLogger(__name__)


class Client:
    """Wires capture, detection, networking and the session state machine together."""

    def __init__(self, config_path: Optional[str], log_level: Optional[str] = None):
        self.config = AvatalkConfig(config_path)
        # Command line overrides the config file
        level = log_level or self.config.get('logging.level', 'INFO')
        setup_logging(self.config, level)
        self.should_exit = False
        self.audio_capture: Optional[AudioCapture] = None
        self.network_client: Optional[NetworkClient] = None
        self.player: Optional[AudioPlayer] = None

    def init(self):
        logger.info("Initializing components...")

        sample_rate = self.config.get('audio.sample_rate', 16000)
        channels = self.config.get('audio.channels', 1)
        chunk_size = self.config.get('audio.chunk_size', 1024)
        monitor_seconds = self.config.get('audio.monitor_seconds', 10.0)

        logger.info(f"Audio settings: {sample_rate}Hz, {channels} channels, "
                    f"{monitor_seconds}s ring, {chunk_size} frames/chunk")

        self.audio_capture = AudioCapture(
            sample_rate=sample_rate,
            channels=channels,
            monitor_seconds=monitor_seconds,
            chunk_size=chunk_size,
            input_device_index=self.config.get('audio.input_device_index'),
        )

        self.monitor = AudioMonitor(
            device=self.audio_capture,
            threshold=self.config.get('vad.threshold', 0.02),
            window_size=self.config.get('vad.window_size', 1024),
            channels=channels,
            min_db=self.config.get('vad.min_db', -60.0),
            max_db=self.config.get('vad.max_db', 0.0),
            epsilon=self.config.get('vad.epsilon', 1e-4),
            publisher=LevelPublisher("audio.level"),
        )
        self.extractor = SnippetExtractor(
            device=self.audio_capture,
            sample_rate=sample_rate,
            channels=channels,
            capacity=self.audio_capture.capacity,
        )
        self.codec = WireCodec(
            sample_rate=sample_rate,
            encoding=self.config.get_encoding(),
            reply_audio_dir=self.config.get('playback.reply_audio_dir'),
        )

        self.dispatcher = Dispatcher()
        transport = ZmqTransport(
            endpoint=self.config.get_endpoint(),
            timeout=self.config.get('network.timeout_seconds', 20.0),
        )
        self.network_client = NetworkClient(
            transport=transport,
            dispatcher=self.dispatcher,
            poll_interval=self.config.get('network.poll_interval_seconds', 0.02),
        )

        if self.config.get('playback.enabled', True):
            self.player = AudioPlayer(self.config.get('playback.output_device_index'))
        self.sink = PubSubAvatarSink(player=self.player, topic="avatar.gesture")
        self.state_publisher = StatePublisher("session.state")

        self.session = SessionStateMachine(
            monitor=self.monitor,
            extractor=self.extractor,
            codec=self.codec,
            client=self.network_client,
            dispatcher=self.dispatcher,
            sink=self.sink,
            device=self.audio_capture,
            capture_delay=self.config.get('session.capture_delay_seconds', 0.0),
            snippet_seconds=self.config.get('session.snippet_seconds', 3.0),
            cooldown_seconds=self.config.get('session.cooldown_seconds', 0.5),
            request_mode=self.config.get_request_mode(),
            sentinel=self.config.get('session.sentinel', DEFAULT_SENTINEL),
            on_state_change=self.state_publisher.get_callback(),
        )
        self.tick_interval = 1.0 / self.config.get('session.tick_hz', 30)

    def run(self, duration: float):
        try:
            self.audio_capture.start_recording()
            self.network_client.start()
            self.sink.trigger("Idle")

            deadline = time.monotonic() + duration if duration else None
            while not self.should_exit:
                started = time.monotonic()
                if deadline is not None and started >= deadline:
                    break
                self.session.tick(started)
                elapsed = time.monotonic() - started
                time.sleep(max(0.0, self.tick_interval - elapsed))
        finally:
            self.cleanup()

    def cleanup(self):
        if self.audio_capture and self.audio_capture.is_recording:
            self.audio_capture.stop_recording()
        if self.network_client:
            self.network_client.stop(timeout=1.0)
        if self.player:
            self.player.stop()
        session = getattr(self, 'session', None)
        if session:
            logger.info(f"Session finished: {session.cycles_started} cycles started, "
                        f"{session.cycles_completed} completed, {session.cycles_failed} failed")


def setup_logging(config, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'data/logs/avatalk.log')
    console_output = config.get('logging.console_output', True)

    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    # Console handler - only if enabled in config
    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger = logging.getLogger(__name__)
    logger.info("="*50)
    logger.info("Avatalk client starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("="*50)


def main() -> None:
    """Main entry point for the Avatalk client."""
    parser = argparse.ArgumentParser(
        description="Avatalk - voice-driven avatar client",
        epilog="Speak to trigger a cycle; Ctrl-C to quit"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: avatalk.yaml)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (overrides config)"
    )

    parser.add_argument(
        "--duration",
        type=float,
        default=0,
        help="Run for this many seconds, then exit (default: 0 = until Ctrl-C)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Avatalk v{__version__}"
    )

    args = parser.parse_args()

    try:
        client = Client(args.config, args.log_level)
        client.init()
        client.run(args.duration)
    except KeyboardInterrupt:
        print("\nGoodbye!")
    except CaptureUnavailable as e:
        print(f"Error: no microphone available: {e}")
        logging.error(f"Capture unavailable: {e}")
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}")
        logging.error(f"Application error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
