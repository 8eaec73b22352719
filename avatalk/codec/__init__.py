"""Audio wire codec module."""

from .wav import (
    float_to_pcm16,
    pcm16_to_float,
    encode_pcm16,
    decode_pcm16,
    encode_wav,
    decode_wav,
)
from .envelope import WireCodec, DEFAULT_SENTINEL

__all__ = [
    'float_to_pcm16',
    'pcm16_to_float',
    'encode_pcm16',
    'decode_pcm16',
    'encode_wav',
    'decode_wav',
    'WireCodec',
    'DEFAULT_SENTINEL',
]
