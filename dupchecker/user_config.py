"""
User configuration management for Image Dup Checker.

Supports configuration from multiple sources (in order of priority):
1. Runtime parameters (highest priority)
2. Environment variables
3. User config file (~/.dupchecker/config.json)
4. Default values from config.py (lowest priority)

Configuration file location: ~/.dupchecker/config.json

Example config.json:
{
    "default_threshold": 0.85,
    "default_extractor": "phash",
    "hash_size": 16,
    "thumbnail_size": [200, 200],
    "credentials_file": null
}
"""

import json
import os
from pathlib import Path
from typing import Any, Optional
import logging

from .config import (
    DEFAULT_THRESHOLD,
    DEFAULT_EXTRACTOR,
    DEFAULT_HASH_SIZE,
    THUMBNAIL_SIZE,
    CREDENTIALS_FILE,
)

logger = logging.getLogger(__name__)


class UserConfig:
    """
    Manages user configuration from file and environment variables.

    Attributes are lazy-loaded and cached for performance.
    """

    _instance: Optional['UserConfig'] = None
    _config_data: Optional[dict] = None

    def __new__(cls):
        """Singleton pattern to ensure one config instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @property
    def config_dir(self) -> Path:
        """Get the configuration directory path."""
        env_dir = os.getenv('DUPCHECKER_CONFIG_DIR')
        if env_dir:
            return Path(env_dir)
        return Path.home() / '.dupchecker'

    @property
    def config_file_path(self) -> Path:
        """Get the configuration file path."""
        return self.config_dir / 'config.json'

    def _load_config_file(self) -> dict:
        """Load configuration from JSON file."""
        if not self.config_file_path.exists():
            return {}

        try:
            with open(self.config_file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
                logger.debug(f"Loaded configuration from {self.config_file_path}")
                return data
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load config file {self.config_file_path}: {e}")
            return {}

    def _get_config_data(self) -> dict:
        """Get cached config data (lazy loading)."""
        if self._config_data is None:
            self._config_data = self._load_config_file()
        return self._config_data

    def reload(self):
        """Reload configuration from file."""
        self._config_data = None

    def get(self, key: str, default: Any = None, env_var: Optional[str] = None) -> Any:
        """
        Get a configuration value with priority:
        1. Environment variable (if env_var specified)
        2. Config file
        3. Default value
        """
        if env_var:
            env_value = os.getenv(env_var)
            if env_value is not None:
                # Try to parse as JSON for numbers and lists
                try:
                    return json.loads(env_value)
                except (json.JSONDecodeError, TypeError):
                    return env_value

        config_data = self._get_config_data()
        if key in config_data:
            return config_data[key]

        return default

    @property
    def default_threshold(self) -> float:
        """Cosine similarity threshold (0-1)."""
        return float(self.get(
            'default_threshold',
            default=DEFAULT_THRESHOLD,
            env_var='DUPCHECKER_THRESHOLD'
        ))

    @property
    def default_extractor(self) -> str:
        """Feature extraction backend name."""
        return self.get(
            'default_extractor',
            default=DEFAULT_EXTRACTOR,
            env_var='DUPCHECKER_EXTRACTOR'
        )

    @property
    def hash_size(self) -> int:
        """pHash size for the phash extractor."""
        return int(self.get(
            'hash_size',
            default=DEFAULT_HASH_SIZE,
            env_var='DUPCHECKER_HASH_SIZE'
        ))

    @property
    def thumbnail_size(self) -> tuple[int, int]:
        """Thumbnail canvas size in pixels."""
        width, height = self.get(
            'thumbnail_size',
            default=THUMBNAIL_SIZE,
            env_var='DUPCHECKER_THUMBNAIL_SIZE'
        )
        return int(width), int(height)

    @property
    def credentials_file(self) -> str:
        """Path to the folder credential store."""
        custom = self.get('credentials_file', env_var='DUPCHECKER_CREDENTIALS_FILE')
        if custom:
            return custom
        return CREDENTIALS_FILE

    def extractor_options(self) -> dict:
        """Keyword arguments for get_extractor() for the configured backend."""
        if self.default_extractor == 'phash':
            return {'hash_size': self.hash_size}
        return {}

    def create_example_config(self):
        """Create an example configuration file."""
        self.config_dir.mkdir(parents=True, exist_ok=True)

        example_config = {
            "_comment": "Image Dup Checker User Configuration",
            "default_threshold": DEFAULT_THRESHOLD,
            "default_extractor": DEFAULT_EXTRACTOR,
            "hash_size": DEFAULT_HASH_SIZE,
            "thumbnail_size": list(THUMBNAIL_SIZE),
            "credentials_file": None,
        }

        try:
            with open(self.config_file_path, 'w', encoding='utf-8') as f:
                json.dump(example_config, f, indent=2)
            logger.info(f"Created example config file at {self.config_file_path}")
            return True
        except OSError as e:
            logger.error(f"Failed to create example config: {e}")
            return False


# Global instance
_user_config = UserConfig()


def get_user_config() -> UserConfig:
    """Get the global UserConfig instance."""
    return _user_config
