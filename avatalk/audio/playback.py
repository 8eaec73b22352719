"""Audio playback of decoded reply clips."""

import pyaudio
import logging
import threading
from typing import Optional
import numpy as np

from ..models.audio import SampleBuffer

logger = logging.getLogger(__name__)


class AudioPlayer:
    """Plays SampleBuffers on the default output device without blocking the caller."""

    def __init__(self, output_device_index: Optional[int] = None):
        self.output_device_index = output_device_index
        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None
        self.playback_thread: Optional[threading.Thread] = None
        self.stop_event = threading.Event()

    def play(self, buffer: SampleBuffer) -> float:
        """Start playing ``buffer`` in the background and return its duration in seconds."""
        if self.playback_thread and self.playback_thread.is_alive():
            logger.warning("Previous clip still playing, interrupting it")
            self.stop_event.set()
            self.playback_thread.join(timeout=1.0)

        if self.pyaudio_instance is None:
            self.pyaudio_instance = pyaudio.PyAudio()

        self.stop_event.clear()
        self.playback_thread = threading.Thread(target=self._play_clip, args=(buffer,), daemon=True)
        self.playback_thread.name = "AudioPlaybackThread"
        self.playback_thread.start()
        return buffer.duration_seconds

    def _play_clip(self, buffer: SampleBuffer) -> None:
        pcm = (np.clip(buffer.samples, -1.0, 1.0) * 32767).round().astype('<i2')
        frames_per_write = 1024
        stream = None
        try:
            stream = self.pyaudio_instance.open(
                format=pyaudio.paInt16,
                channels=buffer.channels,
                rate=buffer.sample_rate,
                output=True,
                output_device_index=self.output_device_index,
            )
            step = frames_per_write * buffer.channels
            for offset in range(0, len(pcm), step):
                if self.stop_event.is_set():
                    break
                stream.write(pcm[offset:offset + step].tobytes())
        except Exception as e:
            logger.error(f"Audio playback failed: {e}", exc_info=True)
        finally:
            if stream:
                stream.stop_stream()
                stream.close()

    def stop(self) -> None:
        """Interrupt playback and release PyAudio."""
        self.stop_event.set()
        if self.playback_thread and self.playback_thread.is_alive():
            self.playback_thread.join(timeout=1.0)
        if self.pyaudio_instance:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None
