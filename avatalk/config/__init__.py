"""YAML configuration loader for avatalk."""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)


DEFAULT_ENDPOINT = "tcp://localhost:5555"


class AvatalkConfig:
    """Avatalk configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, looks for avatalk.yaml
                        in the current directory.
        """
        self.config_file = Path(config_path or "avatalk.yaml")

        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")

        if not config:
            raise ValueError("Configuration file is empty")
        if not isinstance(config, dict):
            raise ValueError("Configuration file must contain a mapping at the top level")

        # Resolve relative paths
        self._resolve_paths(config)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        # Resolve log file path
        if 'logging' in config and 'file_path' in config['logging']:
            log_path = config['logging']['file_path']
            if not os.path.isabs(log_path):
                config['logging']['file_path'] = str(config_dir / log_path)

        # Resolve directory used for reply audio given by relative path
        if 'playback' in config and config['playback'].get('reply_audio_dir'):
            audio_dir = config['playback']['reply_audio_dir']
            if not os.path.isabs(audio_dir):
                config['playback']['reply_audio_dir'] = str(config_dir / audio_dir)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'vad.threshold').

        Args:
            key_path: Dot-separated key path (e.g., 'network.endpoint')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'vad.threshold')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        # Navigate to the parent dictionary
        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_endpoint(self) -> str:
        """Get the inference service endpoint address."""
        return self.get('network.endpoint', DEFAULT_ENDPOINT)

    def get_request_mode(self) -> str:
        """Get the request mode - CRASHES on unknown values."""
        mode = self.get('session.request_mode', 'envelope')
        if mode not in ('envelope', 'sentinel'):
            raise ValueError(f"Unknown session.request_mode: {mode}")
        return mode

    def get_encoding(self) -> str:
        """Get the outbound audio encoding - CRASHES on unknown values."""
        encoding = self.get('network.encoding', 'wav')
        if encoding not in ('wav', 'pcm16'):
            raise ValueError(f"Unknown network.encoding: {encoding}")
        return encoding
