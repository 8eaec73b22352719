"""Unit tests for AvatalkConfig."""

import os
import pytest
from pathlib import Path

from avatalk.config import AvatalkConfig, DEFAULT_ENDPOINT


def write_config(directory, text: str) -> str:
    path = Path(directory) / "avatalk.yaml"
    path.write_text(text, encoding="utf-8")
    return str(path)


@pytest.mark.unit
class TestAvatalkConfig:
    """Test cases for AvatalkConfig."""

    def test_missing_file(self, temp_data_dir):
        with pytest.raises(FileNotFoundError):
            AvatalkConfig(os.path.join(temp_data_dir, "nope.yaml"))

    def test_empty_file(self, temp_data_dir):
        with pytest.raises(ValueError):
            AvatalkConfig(write_config(temp_data_dir, ""))

    def test_invalid_yaml(self, temp_data_dir):
        with pytest.raises(ValueError):
            AvatalkConfig(write_config(temp_data_dir, "vad: [unclosed"))

    def test_dot_path_get_and_default(self, temp_data_dir):
        config = AvatalkConfig(write_config(temp_data_dir, "vad:\n  threshold: 0.05\n"))

        assert config.get('vad.threshold') == 0.05
        assert config.get('vad.window_size', 1024) == 1024
        assert config.get('missing.key') is None

    def test_set_creates_sections(self, temp_data_dir):
        config = AvatalkConfig(write_config(temp_data_dir, "audio:\n  channels: 1\n"))

        config.set('network.timeout_seconds', 5.0)

        assert config.get('network.timeout_seconds') == 5.0

    def test_relative_paths_resolved(self, temp_data_dir):
        config = AvatalkConfig(write_config(
            temp_data_dir,
            "logging:\n  file_path: logs/a.log\nplayback:\n  reply_audio_dir: replies\n"))

        assert config.get('logging.file_path') == str(Path(temp_data_dir) / "logs/a.log")
        assert config.get('playback.reply_audio_dir') == str(Path(temp_data_dir) / "replies")

    def test_endpoint_default(self, temp_data_dir):
        config = AvatalkConfig(write_config(temp_data_dir, "audio:\n  channels: 1\n"))

        assert config.get_endpoint() == DEFAULT_ENDPOINT
        assert config.get_request_mode() == "envelope"
        assert config.get_encoding() == "wav"

    def test_invalid_enumerations(self, temp_data_dir):
        config = AvatalkConfig(write_config(
            temp_data_dir, "session:\n  request_mode: stream\nnetwork:\n  encoding: mp3\n"))

        with pytest.raises(ValueError):
            config.get_request_mode()
        with pytest.raises(ValueError):
            config.get_encoding()

    def test_shipped_example_config_loads(self):
        path = Path(__file__).resolve().parents[2] / "avatalk.yaml"
        config = AvatalkConfig(str(path))

        assert config.get('network.endpoint') == "tcp://localhost:5555"
        assert config.get('vad.min_db') == -60.0
