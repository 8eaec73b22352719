"""Fixed-capacity circular audio store fed by the capture thread."""

import logging

import numpy as np

logger = logging.getLogger(__name__)


class RingBuffer:
    """Circular store of interleaved float frames with a wrapping write cursor.

    Capacity and cursor are counted in frames (one sample per channel).
    There is a single writer; readers only touch already-written regions, so
    reads take no lock.
    """

    def __init__(self, duration_seconds: float, sample_rate: int = 16000, channels: int = 1):
        """Initialize ring buffer.

        Args:
            duration_seconds: How many seconds of audio the ring holds
            sample_rate: Audio sample rate
            channels: Number of audio channels
        """
        self.sample_rate = sample_rate
        self.channels = channels
        self.capacity = int(duration_seconds * sample_rate)
        if self.capacity <= 0:
            raise ValueError(f"Ring buffer capacity must be positive, got {self.capacity} frames")

        self.data = np.zeros((self.capacity, channels), dtype=np.float32)
        self.write_cursor = 0
        self.total_frames = 0

        logger.info(f"RingBuffer initialized: {duration_seconds}s capacity, "
                    f"{self.capacity} frames x {channels} channels")

    def write(self, samples: np.ndarray) -> None:
        """Append interleaved samples, wrapping past the physical end."""
        frames = np.asarray(samples, dtype=np.float32).reshape(-1, self.channels)
        count = len(frames)
        if count == 0:
            return
        self.total_frames += count
        if count > self.capacity:
            # Only the newest capacity frames survive
            frames = frames[-self.capacity:]
            self.write_cursor = (self.write_cursor + count - self.capacity) % self.capacity
            count = self.capacity

        first = min(count, self.capacity - self.write_cursor)
        self.data[self.write_cursor:self.write_cursor + first] = frames[:first]
        if first < count:
            self.data[:count - first] = frames[first:]

        self.write_cursor = (self.write_cursor + count) % self.capacity

    def get_cursor(self) -> int:
        return self.write_cursor

    def read_window(self, out: np.ndarray, start_offset: int) -> None:
        """Copy ``len(out) // channels`` frames starting at ``start_offset`` into ``out``.

        The offset is taken modulo the capacity; a window running past the
        physical end continues at frame 0.
        """
        frames = out.reshape(-1, self.channels)
        count = len(frames)
        if count > self.capacity:
            raise ValueError(f"Window of {count} frames exceeds capacity {self.capacity}")

        start = start_offset % self.capacity
        first = min(count, self.capacity - start)
        frames[:first] = self.data[start:start + first]
        if first < count:
            frames[first:] = self.data[:count - first]

    def clear(self) -> None:
        """Reset contents and cursor."""
        self.data.fill(0.0)
        self.write_cursor = 0
        self.total_frames = 0
        logger.debug("Ring buffer cleared")
