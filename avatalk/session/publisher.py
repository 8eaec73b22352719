"""Session state publisher module for pub/sub event publishing."""

import logging
from typing import Callable
from pubsub import pub
from ..models.events import StateChangeEvent
from ..models.session import SessionState

logger = logging.getLogger(__name__)


class StatePublisher:
    """Publishes session state transitions using pubsub.pub for status displays."""

    def __init__(self, topic: str = "session.state"):
        """Initialize state publisher.

        Args:
            topic: Pub/sub topic name for state changes
        """
        self.topic = topic
        logger.info(f"StatePublisher initialized with topic: {topic}")

    def publish_state_change(self, previous: SessionState, current: SessionState) -> None:
        """Publish a state transition to the pub/sub topic."""
        event = StateChangeEvent(previous=previous.value, current=current.value)
        pub.sendMessage(self.topic, event=event)
        logger.debug(f"Published state change: {event.previous} -> {event.current}")

    def get_callback(self) -> Callable[[SessionState, SessionState], None]:
        """Get callback function for SessionStateMachine to use."""
        return self.publish_state_change
