"""Snippet extraction from the capture ring buffer."""

import logging

import numpy as np

from ..models.audio import SampleBuffer

logger = logging.getLogger(__name__)


class SnippetExtractor:
    """Copies a fixed-duration window ending at a cursor out of the ring."""

    def __init__(self, device, sample_rate: int, channels: int, capacity: int):
        """Initialize extractor.

        Args:
            device: Capture device exposing ``read_window(out, start_offset)``
            sample_rate: Audio sample rate
            channels: Number of interleaved channels
            capacity: Ring capacity in frames
        """
        self.device = device
        self.sample_rate = sample_rate
        self.channels = channels
        self.capacity = capacity

    def frames_for(self, duration_seconds: float) -> int:
        return int(round(duration_seconds * self.sample_rate))

    def extract(self, end_cursor: int, duration_seconds: float) -> SampleBuffer:
        """Extract ``duration_seconds`` of audio ending just before ``end_cursor``.

        Args:
            end_cursor: Frame index one past the newest frame to include
            duration_seconds: Snippet length

        Returns:
            SampleBuffer holding the frames in time order
        """
        if end_cursor < 0 or end_cursor >= self.capacity:
            raise ValueError(f"end_cursor {end_cursor} outside ring of {self.capacity} frames")
        if duration_seconds < 0:
            raise ValueError(f"duration_seconds must be non-negative, got {duration_seconds}")

        sample_count = self.frames_for(duration_seconds)
        if sample_count > self.capacity:
            raise ValueError(f"Snippet of {sample_count} frames exceeds ring capacity {self.capacity}")

        out = np.zeros(sample_count * self.channels, dtype=np.float32)
        start_cursor = end_cursor - sample_count

        if start_cursor >= 0:
            self.device.read_window(out, start_cursor)
        else:
            # Older tail of the ring first, then the head up to the cursor
            remaining = -start_cursor
            split = remaining * self.channels
            self.device.read_window(out[:split], self.capacity - remaining)
            if end_cursor > 0:
                self.device.read_window(out[split:], 0)

        logger.debug(f"Extracted snippet: {sample_count} frames ending at {end_cursor} "
                     f"(start {start_cursor}{', wrapped' if start_cursor < 0 else ''})")
        return SampleBuffer(samples=out, channels=self.channels, sample_rate=self.sample_rate)
