"""Audio capture, monitoring and playback module."""

from .ring_buffer import RingBuffer
from .capture import AudioCapture
from .monitor import AudioMonitor
from .snippet import SnippetExtractor
from .audio_pub import LevelPublisher
from .playback import AudioPlayer

__all__ = [
    'RingBuffer',
    'AudioCapture',
    'AudioMonitor',
    'SnippetExtractor',
    'LevelPublisher',
    'AudioPlayer',
]
