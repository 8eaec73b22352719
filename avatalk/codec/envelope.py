"""Wire codec: audio envelopes, request frames and reply parsing."""

import os
import json
import base64
import binascii
import logging
from pathlib import Path
from typing import Optional, Union

from ..errors import MalformedContainer
from ..models.audio import SampleBuffer
from ..models.envelope import AudioEnvelope, ServerReply
from .wav import encode_wav, decode_wav, encode_pcm16, decode_pcm16

logger = logging.getLogger(__name__)

ENCODINGS = ("wav", "pcm16")
DEFAULT_SENTINEL = "record"
REPLY_TEXT_FIELDS = ("gesture", "audio_b64", "audio_path", "state", "status")


class WireCodec:
    """Encodes outbound snippets and decodes inbound reply audio."""

    def __init__(self, sample_rate: int = 16000, encoding: str = "wav",
                 reply_audio_dir: Optional[str] = None):
        """Initialize codec.

        Args:
            sample_rate: Rate assumed for raw PCM16 payloads that carry none
            encoding: Default outbound payload encoding, "wav" or "pcm16"
            reply_audio_dir: Base directory for relative reply ``audio_path`` values
        """
        if encoding not in ENCODINGS:
            raise ValueError(f"Unknown encoding: {encoding}")
        self.sample_rate = sample_rate
        self.encoding = encoding
        self.reply_audio_dir = reply_audio_dir

    def encode(self, buffer: SampleBuffer, encoding: Optional[str] = None) -> AudioEnvelope:
        """Encode a sample buffer into an immutable envelope."""
        encoding = encoding or self.encoding
        if encoding == "wav":
            payload = encode_wav(buffer)
        elif encoding == "pcm16":
            payload = encode_pcm16(buffer)
        else:
            raise ValueError(f"Unknown encoding: {encoding}")

        return AudioEnvelope(
            channels=buffer.channels,
            payload=payload,
            encoding=encoding,
            sample_rate=buffer.sample_rate,
        )

    def decode(self, data: bytes, channels: int = 1, sample_rate: Optional[int] = None) -> SampleBuffer:
        """Decode a WAV container, or raw PCM16 using the out-of-band channel count."""
        if data[:4] == b'RIFF':
            return decode_wav(data)
        return decode_pcm16(data, channels=channels, sample_rate=sample_rate or self.sample_rate)

    def decode_envelope(self, envelope: AudioEnvelope) -> SampleBuffer:
        return self.decode(envelope.payload, channels=envelope.channels,
                           sample_rate=envelope.sample_rate)

    @staticmethod
    def encode_request(request: Union[AudioEnvelope, str]) -> str:
        """Render a request frame: an envelope as JSON text, or a plain sentinel string."""
        if isinstance(request, AudioEnvelope):
            return request.to_json()
        return request

    @staticmethod
    def parse_reply(frame: Union[str, bytes]) -> ServerReply:
        """Pick the consumed fields out of a JSON reply frame."""
        if isinstance(frame, bytes):
            frame = frame.decode('utf-8', errors='replace')
        try:
            body = json.loads(frame)
        except json.JSONDecodeError as e:
            raise MalformedContainer(f"Reply is not valid JSON: {e}") from e
        if not isinstance(body, dict):
            raise MalformedContainer(f"Reply must be a JSON object, got {type(body).__name__}")

        for field in REPLY_TEXT_FIELDS:
            value = body.get(field)
            if value is not None and not isinstance(value, str):
                raise MalformedContainer(f"Reply field {field!r} must be a string, got {type(value).__name__}")

        channels = body.get('channels') or 1
        if isinstance(channels, bool) or not isinstance(channels, int) or channels < 1:
            raise MalformedContainer(f"Invalid channel count: {body.get('channels')!r}")

        return ServerReply(
            gesture=body.get('gesture') or None,
            audio_b64=body.get('audio_b64') or None,
            audio_path=body.get('audio_path') or None,
            channels=channels,
            state=body.get('state') or None,
            status=body.get('status') or None,
        )

    def reply_audio(self, reply: ServerReply) -> Optional[SampleBuffer]:
        """Decode the audio a reply carries inline or by path; None if it carries none."""
        if reply.audio_b64:
            try:
                data = base64.b64decode(reply.audio_b64, validate=True)
            except (binascii.Error, ValueError, TypeError) as e:
                raise MalformedContainer(f"audio_b64 is not valid base64: {e}") from e
            return self.decode(data, channels=reply.channels)

        if reply.audio_path:
            path = self._resolve_audio_path(reply.audio_path)
            try:
                data = path.read_bytes()
            except OSError as e:
                raise MalformedContainer(f"Cannot read reply audio {path}: {e}") from e
            return self.decode(data, channels=reply.channels)

        return None

    def _resolve_audio_path(self, audio_path: str) -> Path:
        if not isinstance(audio_path, str):
            raise MalformedContainer(f"audio_path must be a string, got {type(audio_path).__name__}")
        # Replies from Windows hosts use backslashes
        path = Path(audio_path.replace('\\', '/'))
        if not path.is_absolute() and self.reply_audio_dir:
            path = Path(self.reply_audio_dir) / path
        return Path(os.path.expanduser(str(path)))
