"""Audio-related data models."""

from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass
class SampleBuffer:
    """Interleaved float samples in [-1.0, 1.0] with their format."""
    samples: np.ndarray
    channels: int = 1
    sample_rate: int = 16000

    def __post_init__(self):
        """Normalize samples to a flat float32 array and check the layout."""
        self.samples = np.asarray(self.samples, dtype=np.float32).reshape(-1)
        if self.channels < 1:
            raise ValueError(f"channels must be >= 1, got {self.channels}")
        if self.sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {self.sample_rate}")
        if len(self.samples) % self.channels != 0:
            raise ValueError(
                f"{len(self.samples)} samples is not a multiple of {self.channels} channels")

    def __len__(self) -> int:
        return len(self.samples)

    @property
    def frame_count(self) -> int:
        return len(self.samples) // self.channels

    @property
    def duration_seconds(self) -> float:
        return self.frame_count / self.sample_rate


@dataclass
class VoiceLevel:
    """Result of one AudioMonitor tick."""
    ready: bool
    amplitude: float = 0.0  # Linear mean absolute amplitude
    level: Optional[float] = None  # dB-normalized to [0, 1]
    voice_present: bool = False

    @classmethod
    def not_ready(cls) -> "VoiceLevel":
        return cls(ready=False)


@dataclass
class AudioStats:
    """Audio recording statistics."""
    is_recording: bool
    duration_seconds: float
    sample_rate: int
    chunk_size: int
    total_chunks: int
    write_cursor: int
    capacity_frames: int
