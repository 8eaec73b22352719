"""Linear PCM16 and RIFF/WAVE encoding and decoding."""

import io
import wave
import struct
import logging

import numpy as np

from ..errors import MalformedContainer, TruncatedPayload
from ..models.audio import SampleBuffer

logger = logging.getLogger(__name__)

WAVE_FORMAT_PCM = 0x0001
WAVE_FORMAT_EXTENSIBLE = 0xFFFE
BITS_PER_SAMPLE = 16


def float_to_pcm16(samples: np.ndarray) -> bytes:
    """Convert float samples to little-endian signed 16-bit PCM bytes."""
    clipped = np.clip(np.asarray(samples, dtype=np.float64), -1.0, 1.0)
    return np.round(clipped * 32767).astype('<i2').tobytes()


def pcm16_to_float(data: bytes) -> np.ndarray:
    """Convert little-endian signed 16-bit PCM bytes to floats in [-1, 1)."""
    if len(data) % 2:
        raise TruncatedPayload(f"PCM16 payload has odd length {len(data)}")
    return np.frombuffer(data, dtype='<i2').astype(np.float32) / 32768.0


def encode_pcm16(buffer: SampleBuffer) -> bytes:
    return float_to_pcm16(buffer.samples)


def decode_pcm16(data: bytes, channels: int = 1, sample_rate: int = 16000) -> SampleBuffer:
    """Decode raw PCM16 whose channel count travels out of band."""
    if channels < 1:
        raise MalformedContainer(f"Invalid channel count: {channels}")
    samples = pcm16_to_float(data)
    if len(samples) % channels:
        raise TruncatedPayload(
            f"{len(samples)} samples do not fill whole {channels}-channel frames")
    return SampleBuffer(samples=samples, channels=channels, sample_rate=sample_rate)


def encode_wav(buffer: SampleBuffer) -> bytes:
    """Wrap a sample buffer in a canonical 44-byte-header WAV container."""
    out = io.BytesIO()
    with wave.open(out, 'wb') as wf:
        wf.setnchannels(buffer.channels)
        wf.setsampwidth(BITS_PER_SAMPLE // 8)
        wf.setframerate(buffer.sample_rate)
        wf.writeframes(encode_pcm16(buffer))
    return out.getvalue()


def decode_wav(data: bytes) -> SampleBuffer:
    """Parse a RIFF/WAVE container holding 16-bit PCM.

    Non-"data" chunks (LIST, fact, ...) are skipped by their declared size.

    Raises:
        MalformedContainer: not RIFF/WAVE, unsupported format, or no "data" chunk
        TruncatedPayload: the "data" chunk declares more bytes than remain
    """
    if len(data) < 12 or data[0:4] != b'RIFF' or data[8:12] != b'WAVE':
        raise MalformedContainer("Not a RIFF/WAVE container")

    channels = None
    sample_rate = None
    pos = 12
    while pos + 8 <= len(data):
        chunk_id = data[pos:pos + 4]
        chunk_size, = struct.unpack_from('<I', data, pos + 4)
        pos += 8

        if chunk_id == b'fmt ':
            if chunk_size < 16 or pos + chunk_size > len(data):
                raise MalformedContainer(f"fmt chunk too short ({chunk_size} bytes)")
            format_tag, channels, sample_rate, _byte_rate, _block_align, bits = \
                struct.unpack_from('<HHIIHH', data, pos)
            if format_tag not in (WAVE_FORMAT_PCM, WAVE_FORMAT_EXTENSIBLE):
                raise MalformedContainer(f"Unsupported WAV format tag 0x{format_tag:04x}")
            if bits != BITS_PER_SAMPLE:
                raise MalformedContainer(f"Unsupported sample width: {bits} bits")
            if channels < 1 or sample_rate < 1:
                raise MalformedContainer(f"Invalid fmt fields: {channels} channels at {sample_rate}Hz")

        elif chunk_id == b'data':
            if channels is None:
                raise MalformedContainer("data chunk precedes fmt chunk")
            if chunk_size > len(data) - pos:
                raise TruncatedPayload(
                    f"data chunk declares {chunk_size} bytes, only {len(data) - pos} remain")
            frame_bytes = 2 * channels
            usable = chunk_size - chunk_size % frame_bytes
            if usable != chunk_size:
                logger.warning(f"Dropping {chunk_size - usable} bytes of partial frame")
            samples = pcm16_to_float(data[pos:pos + usable])
            return SampleBuffer(samples=samples, channels=channels, sample_rate=sample_rate)

        else:
            logger.debug(f"Skipping WAV chunk {chunk_id!r} ({chunk_size} bytes)")

        # Chunk payloads are padded to an even length
        pos += chunk_size + (chunk_size & 1)

    raise MalformedContainer("Stream ended before a data chunk was found")
