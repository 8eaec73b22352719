"""Audio capture module feeding the monitoring ring buffer."""

import pyaudio
import logging
from threading import Thread, Event
from typing import Optional
from datetime import datetime
import numpy as np

from ..errors import CaptureUnavailable
from ..models.audio import AudioStats
from .ring_buffer import RingBuffer


logger = logging.getLogger(__name__)


class AudioCapture:
    """Continuous microphone capture into a circular buffer.

    The capture thread is the only writer of ``ring``. Consumers read through
    ``get_cursor()`` and ``read_window()``.
    """

    def __init__(
        self,
        sample_rate: int = 16000,
        channels: int = 1,
        monitor_seconds: float = 10.0,
        chunk_size: int = 1024,
        input_device_index: Optional[int] = None,
    ):
        """Initialize audio capture with specified parameters.

        Args:
            sample_rate: Audio sample rate
            channels: Number of audio channels (1 for mono)
            monitor_seconds: Length of the circular recording buffer
            chunk_size: Size of each audio chunk in frames
            input_device_index: PyAudio device index, None for the default input
        """
        self.sample_rate = sample_rate
        self.channels = channels
        self.chunk_size = chunk_size
        self.input_device_index = input_device_index
        self.ring = RingBuffer(monitor_seconds, sample_rate=sample_rate, channels=channels)

        # Recording thread management
        self.recording_thread: Optional[Thread] = None
        self.stop_event = Event()
        self.is_recording = False

        # Statistics tracking
        self.start_time: Optional[datetime] = None
        self.total_chunks = 0

        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self.stream = None

    @property
    def capacity(self) -> int:
        return self.ring.capacity

    def get_cursor(self) -> int:
        return self.ring.get_cursor()

    def read_window(self, out: np.ndarray, start_offset: int) -> None:
        self.ring.read_window(out, start_offset)

    def start_recording(self) -> None:
        """Open the input device and start continuous recording in background thread."""
        if self.is_recording:
            logger.warning("Recording already in progress")
            return

        logger.info("Starting audio recording")
        self.stream = self.__open_audio_stream()
        self.stop_event.clear()
        self.start_time = datetime.now()
        self.total_chunks = 0

        self.recording_thread = Thread(target=self._record_continuously, daemon=True)
        self.recording_thread.name = "AudioCaptureThread"
        self.recording_thread.start()
        self.is_recording = True

    def stop_recording(self) -> None:
        """Stop recording and clean up resources."""
        if not self.is_recording:
            logger.warning("No recording in progress")
            return

        logger.info("Stopping audio recording")
        self.stop_event.set()

        # Wait for recording thread to finish
        if self.recording_thread and self.recording_thread.is_alive():
            self.recording_thread.join(timeout=2.0)
            if self.recording_thread.is_alive():
                logger.warning("Recording thread did not stop cleanly")

        self.is_recording = False
        logger.info(f"Recording stopped. Total chunks: {self.total_chunks}")

    def __open_audio_stream(self):
        self.pyaudio_instance = pyaudio.PyAudio()
        try:
            if self.input_device_index is None:
                info = self.pyaudio_instance.get_default_input_device_info()
            else:
                info = self.pyaudio_instance.get_device_info_by_index(self.input_device_index)
            if int(info.get('maxInputChannels', 0)) < self.channels:
                raise CaptureUnavailable(
                    f"Input device '{info.get('name')}' has fewer than {self.channels} input channels")

            stream = self.pyaudio_instance.open(
                format=pyaudio.paInt16,
                channels=self.channels,
                rate=self.sample_rate,
                input=True,
                input_device_index=self.input_device_index,
                frames_per_buffer=self.chunk_size,
                stream_callback=None
            )
        except CaptureUnavailable:
            self.__release_pyaudio()
            raise
        except (OSError, ValueError) as e:
            self.__release_pyaudio()
            raise CaptureUnavailable(f"No usable input device: {e}") from e

        logger.info(f"Audio stream opened: {self.sample_rate}Hz, "
                    f"{self.chunk_size} frames/chunk, {self.channels} channels")
        return stream

    def __release_pyaudio(self) -> None:
        if self.pyaudio_instance:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None

    def __read_audio_chunk(self, stream) -> bytes:
        audio_chunk = stream.read(
            self.chunk_size,
            exception_on_overflow=False
        )
        self.total_chunks += 1
        return audio_chunk

    def _record_continuously(self) -> None:
        """Internal method: continuous recording loop in background thread."""
        stream = self.stream
        try:
            while not self.stop_event.is_set():
                audio_chunk = self.__read_audio_chunk(stream)
                samples = np.frombuffer(audio_chunk, dtype='<i2').astype(np.float32) / 32768.0
                # Drop a trailing partial frame if the driver hands one over
                usable = len(samples) - len(samples) % self.channels
                self.ring.write(samples[:usable])
        except Exception as e:
            logger.error(f"Audio capture failed: {e}", exc_info=True)
        finally:
            if stream:
                stream.stop_stream()
                stream.close()
            self.stream = None
            self.__release_pyaudio()

    def get_recording_stats(self) -> AudioStats:
        """Get current recording statistics."""
        duration = 0.0
        if self.start_time:
            duration = (datetime.now() - self.start_time).total_seconds()

        return AudioStats(
            is_recording=self.is_recording,
            duration_seconds=duration,
            sample_rate=self.sample_rate,
            chunk_size=self.chunk_size,
            total_chunks=self.total_chunks,
            write_cursor=self.ring.get_cursor(),
            capacity_frames=self.ring.capacity,
        )

    def __del__(self):
        """Ensure resources are cleaned up on deletion."""
        if getattr(self, 'is_recording', False):
            self.stop_recording()
