"""Avatar sinks receiving gesture triggers and reply audio."""

from abc import ABC, abstractmethod
from typing import Optional
import logging

from pubsub import pub

from ..models.audio import SampleBuffer

logger = logging.getLogger(__name__)


class AbstractAvatarSink(ABC):
    """Abstract base class for the animation/playback side of the avatar."""

    @abstractmethod
    def trigger(self, gesture: str) -> None:
        """Fire a named animation trigger ("Idle", "Listen", "Talk" or a server gesture)."""
        pass

    @abstractmethod
    def play(self, buffer: SampleBuffer) -> float:
        """Start playing a decoded clip.

        Returns:
            Seconds until playback completes
        """
        pass


class PubSubAvatarSink(AbstractAvatarSink):
    """Publishes gesture triggers on a pub/sub topic and plays audio through an AudioPlayer."""

    def __init__(self, player=None, topic: str = "avatar.gesture"):
        """Initialize sink.

        Args:
            player: Optional AudioPlayer; without one, clips are only timed
            topic: Pub/sub topic name for gesture triggers
        """
        self.player = player
        self.topic = topic
        self.last_gesture: Optional[str] = None
        logger.info(f"PubSubAvatarSink initialized with topic: {topic}")

    def trigger(self, gesture: str) -> None:
        self.last_gesture = gesture
        logger.debug(f"Gesture trigger: {gesture}")
        pub.sendMessage(self.topic, gesture=gesture)

    def play(self, buffer: SampleBuffer) -> float:
        if self.player is not None:
            return self.player.play(buffer)
        return buffer.duration_seconds
