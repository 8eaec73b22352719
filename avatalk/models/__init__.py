"""Data models for the avatalk client."""

from .audio import SampleBuffer, VoiceLevel, AudioStats
from .envelope import AudioEnvelope, ServerReply
from .events import ReplyReceived, RequestFailed, StateChangeEvent
from .session import SessionState, ClientState

__all__ = [
    "SampleBuffer",
    "VoiceLevel",
    "AudioStats",
    "AudioEnvelope",
    "ServerReply",
    "ReplyReceived",
    "RequestFailed",
    "StateChangeEvent",
    "SessionState",
    "ClientState",
]
