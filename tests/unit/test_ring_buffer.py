"""Unit tests for RingBuffer."""

import pytest
import numpy as np

from avatalk.audio.ring_buffer import RingBuffer


@pytest.mark.unit
class TestRingBuffer:
    """Test cases for RingBuffer."""

    def test_initialization(self):
        ring = RingBuffer(duration_seconds=2.0, sample_rate=8000, channels=2)

        assert ring.capacity == 16000
        assert ring.data.shape == (16000, 2)
        assert ring.get_cursor() == 0

    def test_zero_capacity_rejected(self):
        with pytest.raises(ValueError):
            RingBuffer(duration_seconds=0.0, sample_rate=16000)

    def test_write_advances_cursor(self):
        ring = RingBuffer(duration_seconds=1.0, sample_rate=10)
        ring.write(np.full(4, 0.5))

        assert ring.get_cursor() == 4
        assert ring.total_frames == 4
        np.testing.assert_allclose(ring.data[:4, 0], 0.5)

    def test_write_wraps_past_end(self):
        ring = RingBuffer(duration_seconds=1.0, sample_rate=10)
        ring.write(np.arange(8, dtype=np.float32))
        ring.write(np.array([100, 101, 102, 103], dtype=np.float32))

        assert ring.get_cursor() == 2
        assert list(ring.data[8:, 0]) == [100, 101]
        assert list(ring.data[:2, 0]) == [102, 103]

    def test_write_longer_than_capacity_keeps_newest(self):
        ring = RingBuffer(duration_seconds=1.0, sample_rate=10)
        ring.write(np.arange(25, dtype=np.float32))

        assert ring.get_cursor() == 5
        out = np.zeros(10, dtype=np.float32)
        ring.read_window(out, ring.get_cursor())
        assert list(out) == list(range(15, 25))

    def test_stereo_frames_stay_interleaved(self):
        ring = RingBuffer(duration_seconds=1.0, sample_rate=4, channels=2)
        ring.write(np.array([0.1, -0.1, 0.2, -0.2], dtype=np.float32))

        assert ring.get_cursor() == 2
        out = np.zeros(4, dtype=np.float32)
        ring.read_window(out, 0)
        np.testing.assert_allclose(out, [0.1, -0.1, 0.2, -0.2])

    def test_read_window_too_large(self, ramp_ring):
        with pytest.raises(ValueError):
            ramp_ring.read_window(np.zeros(101, dtype=np.float32), 0)

    def test_clear(self, ramp_ring):
        ramp_ring.write_cursor = 42
        ramp_ring.clear()

        assert ramp_ring.get_cursor() == 0
        assert not ramp_ring.data.any()
