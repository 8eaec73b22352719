"""Unit tests for PCM16 and WAV encoding/decoding."""

import io
import wave
import struct
import pytest
import numpy as np

from avatalk.codec.wav import (
    float_to_pcm16,
    pcm16_to_float,
    decode_pcm16,
    encode_wav,
    decode_wav,
)
from avatalk.errors import MalformedContainer, TruncatedPayload
from avatalk.models.audio import SampleBuffer


def build_wav(chunks, channels=1, sample_rate=16000, bits=16, format_tag=1):
    """Assemble a RIFF/WAVE byte string from (chunk_id, payload) pairs after fmt."""
    block_align = channels * bits // 8
    fmt = struct.pack('<HHIIHH', format_tag, channels, sample_rate,
                      sample_rate * block_align, block_align, bits)
    body = b'WAVE' + b'fmt ' + struct.pack('<I', len(fmt)) + fmt
    for chunk_id, payload in chunks:
        body += chunk_id + struct.pack('<I', len(payload)) + payload
        if len(payload) % 2:
            body += b'\x00'
    return b'RIFF' + struct.pack('<I', len(body)) + body


@pytest.mark.unit
class TestPcm16:
    """Test cases for raw PCM16 conversion."""

    def test_encode_half_scale(self):
        data = float_to_pcm16(np.array([0.5, -0.5]))

        assert data == struct.pack('<hh', 16384, -16384)

    def test_encode_clamps_out_of_range(self):
        data = float_to_pcm16(np.array([1.5, -2.0, 1.0, -1.0]))

        assert struct.unpack('<hhhh', data) == (32767, -32767, 32767, -32767)

    def test_decode_example_bytes(self):
        samples = pcm16_to_float(bytes([0x00, 0x00, 0xFF, 0x7F]))

        assert samples[0] == 0.0
        assert samples[1] == pytest.approx(32767 / 32768.0)

    def test_decode_negative_full_scale(self):
        samples = pcm16_to_float(struct.pack('<h', -32768))

        assert samples[0] == -1.0

    def test_decode_odd_length(self):
        with pytest.raises(TruncatedPayload):
            pcm16_to_float(b'\x00\x00\x01')

    def test_decode_pcm16_with_out_of_band_channels(self):
        buffer = decode_pcm16(struct.pack('<hhhh', 1, 2, 3, 4), channels=2, sample_rate=8000)

        assert buffer.channels == 2
        assert buffer.frame_count == 2
        assert buffer.sample_rate == 8000

    def test_decode_pcm16_partial_frame(self):
        with pytest.raises(TruncatedPayload):
            decode_pcm16(struct.pack('<hhh', 1, 2, 3), channels=2)


@pytest.mark.unit
class TestWavContainer:
    """Test cases for RIFF/WAVE encode and decode."""

    def test_encode_header_layout(self, sine_buffer):
        data = encode_wav(sine_buffer)

        assert data[0:4] == b'RIFF'
        assert data[8:12] == b'WAVE'
        assert data[12:16] == b'fmt '
        assert data[36:40] == b'data'
        assert struct.unpack_from('<I', data, 40)[0] == len(sine_buffer) * 2
        assert len(data) == 44 + len(sine_buffer) * 2

    def test_encode_readable_by_wave_module(self):
        buffer = SampleBuffer(samples=np.zeros(600), channels=2, sample_rate=22050)

        with wave.open(io.BytesIO(encode_wav(buffer)), 'rb') as wf:
            assert wf.getnchannels() == 2
            assert wf.getframerate() == 22050
            assert wf.getsampwidth() == 2
            assert wf.getnframes() == 300

    def test_round_trip_within_quantization(self, sine_buffer):
        decoded = decode_wav(encode_wav(sine_buffer))

        assert decoded.channels == sine_buffer.channels
        assert decoded.sample_rate == sine_buffer.sample_rate
        assert len(decoded) == len(sine_buffer)
        assert np.max(np.abs(decoded.samples - sine_buffer.samples)) <= 1 / 32768 + 1e-7

    def test_round_trip_stereo_full_scale(self):
        rng = np.random.default_rng(7)
        buffer = SampleBuffer(samples=rng.uniform(-1, 1, 2000), channels=2, sample_rate=44100)

        decoded = decode_wav(encode_wav(buffer))

        # Scaling by 32767 on the way out and 32768 on the way back adds up to |s|/32768
        bound = (np.abs(buffer.samples) + 0.5) / 32768 + 1e-7
        assert decoded.channels == 2
        assert np.all(np.abs(decoded.samples - buffer.samples) <= bound)

    def test_skips_non_data_chunks(self):
        pcm = struct.pack('<hh', 0, 32767)
        data = build_wav([(b'LIST', b'INFOsoftware'), (b'fact', b'\x02\x00\x00'), (b'data', pcm)])

        buffer = decode_wav(data)

        assert buffer.samples[0] == 0.0
        assert buffer.samples[1] == pytest.approx(32767 / 32768.0)

    def test_missing_data_chunk(self):
        data = build_wav([(b'LIST', b'INFOabcd')])

        with pytest.raises(MalformedContainer):
            decode_wav(data)

    def test_truncated_data_chunk(self):
        data = build_wav([(b'data', b'\x00' * 8)])
        data = data[:-4]

        with pytest.raises(TruncatedPayload):
            decode_wav(data)

    def test_not_riff(self):
        with pytest.raises(MalformedContainer):
            decode_wav(b'OggS' + b'\x00' * 40)

    def test_empty_input(self):
        with pytest.raises(MalformedContainer):
            decode_wav(b'')

    def test_unsupported_bit_depth(self):
        data = build_wav([(b'data', b'\x00' * 6)], bits=24)

        with pytest.raises(MalformedContainer):
            decode_wav(data)

    def test_float_format_rejected(self):
        data = build_wav([(b'data', b'\x00' * 8)], format_tag=3)

        with pytest.raises(MalformedContainer):
            decode_wav(data)

    def test_extended_fmt_chunk(self):
        fmt = struct.pack('<HHIIHHH', 1, 1, 16000, 32000, 2, 16, 0)
        body = (b'WAVE' + b'fmt ' + struct.pack('<I', len(fmt)) + fmt
                + b'data' + struct.pack('<I', 4) + struct.pack('<hh', 100, -100))
        data = b'RIFF' + struct.pack('<I', len(body)) + body

        buffer = decode_wav(data)

        assert len(buffer) == 2
        assert buffer.samples[1] == pytest.approx(-100 / 32768.0)
