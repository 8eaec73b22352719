"""Voice level publisher module for pub/sub event publishing."""

import logging
from pubsub import pub
from ..models.audio import VoiceLevel

logger = logging.getLogger(__name__)


class LevelPublisher:
    """Publishes voice levels using pubsub.pub for volume displays."""

    def __init__(self, topic: str = "audio.level"):
        """Initialize level publisher.

        Args:
            topic: Pub/sub topic name for voice levels
        """
        self.topic = topic
        logger.info(f"LevelPublisher initialized with topic: {topic}")

    def publish_level(self, level: VoiceLevel) -> None:
        """Publish a voice level to the pub/sub topic.

        Args:
            level: VoiceLevel to publish
        """
        pub.sendMessage(self.topic, level=level)
