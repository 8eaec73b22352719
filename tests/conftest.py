"""Pytest configuration and fixtures for avatalk tests."""

import base64
import json
import threading
import pytest
import tempfile
import logging
from unittest.mock import Mock, patch
import numpy as np

from avatalk.audio.ring_buffer import RingBuffer
from avatalk.codec.wav import encode_wav
from avatalk.models.audio import SampleBuffer
from avatalk.session.sink import AbstractAvatarSink


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    for marker in ("unit", "integration", "slow", "hardware"):
        config.addinivalue_line("markers", f"{marker}: {marker} tests")


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def sine_buffer():
    """A 0.25s, 440Hz mono sine at half scale."""
    sample_rate = 16000
    t = np.arange(int(0.25 * sample_rate)) / sample_rate
    samples = 0.5 * np.sin(2 * np.pi * 440 * t)
    return SampleBuffer(samples=samples, channels=1, sample_rate=sample_rate)


@pytest.fixture
def ramp_ring():
    """A 100-frame mono ring whose frame i holds the value i."""
    ring = RingBuffer(duration_seconds=1.0, sample_rate=100, channels=1)
    ring.data[:, 0] = np.arange(100, dtype=np.float32)
    return ring


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        # Configure mock stream
        mock_stream.read.return_value = b'\x00' * 2048  # Silent audio
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        # Configure mock PyAudio instance
        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None
        mock_pyaudio_instance.get_default_input_device_info.return_value = {
            'name': 'Mock Microphone',
            'maxInputChannels': 2,
        }

        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


class RecordingSink(AbstractAvatarSink):
    """Avatar sink that records everything it is asked to do."""

    def __init__(self):
        self.triggers = []
        self.played = []

    def trigger(self, gesture: str) -> None:
        self.triggers.append(gesture)

    def play(self, buffer: SampleBuffer) -> float:
        self.played.append(buffer)
        return buffer.duration_seconds


@pytest.fixture
def recording_sink():
    return RecordingSink()


class FakeTransport:
    """Transport stand-in: answers with canned replies or raises canned errors.

    Each entry in ``responses`` is a reply string or an exception instance.
    When ``gate`` is set, ``request`` waits for it before answering.
    """

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.frames = []
        self.closed = False
        self.gate = None
        self.lock = threading.Lock()

    def request(self, frame: str) -> str:
        with self.lock:
            self.frames.append(frame)
            response = self.responses.pop(0) if self.responses else json.dumps({"gesture": ""})
        if self.gate is not None:
            self.gate.wait(5.0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_transport():
    return FakeTransport()


def make_reply_frame(buffer=None, gesture="Wave", **extra) -> str:
    """Build a JSON reply frame carrying ``buffer`` as base64 WAV."""
    body = {"gesture": gesture}
    if buffer is not None:
        body["audio_b64"] = base64.b64encode(encode_wav(buffer)).decode("ascii")
    body.update(extra)
    return json.dumps(body)


@pytest.fixture
def reply_frame():
    return make_reply_frame
