"""Amplitude-based voice activity monitoring over the capture ring."""

import math
import logging
from typing import Optional

import numpy as np

from ..models.audio import VoiceLevel

logger = logging.getLogger(__name__)


class AudioMonitor:
    """Computes a voice level from the most recent window of captured audio."""

    def __init__(self,
                 device,
                 threshold: float,
                 window_size: int = 1024,
                 channels: int = 1,
                 min_db: float = -60.0,
                 max_db: float = 0.0,
                 epsilon: float = 1e-4,
                 publisher=None):
        """Initialize monitor.

        Args:
            device: Capture device exposing ``get_cursor()`` and ``read_window()``
            threshold: Linear mean-absolute amplitude above which voice is present
            window_size: Detection window in frames
            channels: Number of interleaved channels
            min_db: Level mapped to 0.0
            max_db: Level mapped to 1.0
            epsilon: Amplitudes at or below this count as silence
            publisher: Optional LevelPublisher notified with each ready level
        """
        if max_db <= min_db:
            raise ValueError(f"max_db ({max_db}) must be greater than min_db ({min_db})")
        self.device = device
        self.threshold = threshold
        self.window_size = window_size
        self.channels = channels
        self.min_db = min_db
        self.max_db = max_db
        self.epsilon = epsilon
        self.publisher = publisher
        self._window = np.zeros(window_size * channels, dtype=np.float32)
        self.last_level: Optional[VoiceLevel] = None

    def normalize(self, amplitude: float) -> float:
        """Map a linear amplitude to [0, 1] across the configured dB range."""
        if amplitude <= self.epsilon:
            return 0.0
        db = 20.0 * math.log10(amplitude)
        level = (db - self.min_db) / (self.max_db - self.min_db)
        return min(1.0, max(0.0, level))

    def tick(self) -> VoiceLevel:
        """Sample the newest window and compute its level."""
        cursor = self.device.get_cursor()
        start = cursor - self.window_size
        if start < 0:
            return VoiceLevel.not_ready()

        self.device.read_window(self._window, start)
        amplitude = float(np.mean(np.abs(self._window)))

        result = VoiceLevel(
            ready=True,
            amplitude=amplitude,
            level=self.normalize(amplitude),
            voice_present=amplitude > self.threshold,
        )
        self.last_level = result

        if self.publisher is not None:
            self.publisher.publish_level(result)
        return result
