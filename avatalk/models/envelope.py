"""Wire envelope models exchanged with the inference service."""

import base64
import json
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class AudioEnvelope:
    """Encoded audio plus the metadata that travels with it.

    ``payload`` is either a full RIFF/WAVE container (``encoding == "wav"``)
    or raw little-endian PCM16 (``encoding == "pcm16"``), in which case the
    channel count only exists out of band in this envelope.
    """
    channels: int
    payload: bytes
    encoding: str = "wav"
    sample_rate: int = 16000
    gesture: Optional[str] = None
    status: Optional[str] = None

    @property
    def audio_b64(self) -> str:
        return base64.b64encode(self.payload).decode("ascii")

    def to_json(self) -> str:
        """Render the request frame text."""
        body = {
            "channels": self.channels,
            "audio_b64": self.audio_b64,
            "format": self.encoding,
            "sample_rate": self.sample_rate,
        }
        if self.gesture:
            body["gesture"] = self.gesture
        if self.status:
            body["status"] = self.status
        return json.dumps(body)


@dataclass(frozen=True)
class ServerReply:
    """Fields consumed from a reply frame. Anything else is ignored."""
    gesture: Optional[str] = None
    audio_b64: Optional[str] = None
    audio_path: Optional[str] = None
    channels: int = 1
    state: Optional[str] = None
    status: Optional[str] = None

    @property
    def has_audio(self) -> bool:
        return bool(self.audio_b64) or bool(self.audio_path)
