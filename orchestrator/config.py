#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Configuration management for mp3tag.
Loads a YAML config with environment variable support for credentials.
"""

import os
import yaml
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "mp3tag" / "config.yaml"


class ConfigManager:
    """
    Configuration manager that loads settings from a YAML file.
    Supports environment variable expansion for sensitive values.
    """

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self._config: Dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        """Load configuration file, falling back to defaults"""
        if self.config_path.exists():
            with open(self.config_path, 'r', encoding='utf-8') as f:
                self._config = yaml.safe_load(f) or {}
        else:
            self._config = self._default_config()

    def save(self) -> None:
        """Write configuration back to disk"""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(self._config, f, allow_unicode=True, sort_keys=False)

    def _default_config(self) -> Dict[str, Any]:
        """Return default configuration"""
        return {
            'spotify': {
                'client_id': '${SPOTIFY_CLIENT_ID}',
                'client_secret': '${SPOTIFY_CLIENT_SECRET}'
            },
            'sources': {
                'default': 'spotify'
            },
            'api': {
                'spotify': {'rate_limit': 0.0},
                'melon': {'rate_limit': 1.0}
            },
            'logging': {
                'level': 'INFO',
                'file': None
            }
        }

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get config value with dot notation.

        Examples:
            config.get('spotify.client_id')
            config.get('api.melon.rate_limit')

        Environment variables are expanded if value is like ${VAR_NAME}
        """
        keys = key.split('.')
        value = self._config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default
            if value is None:
                return default

        # Expand environment variables
        if isinstance(value, str) and value.startswith('${') and value.endswith('}'):
            env_var = value[2:-1]
            return os.environ.get(env_var, default)

        return value

    def set(self, key: str, value: Any) -> None:
        """Set config value with dot notation, creating sections as needed"""
        keys = key.split('.')
        section = self._config
        for k in keys[:-1]:
            if not isinstance(section.get(k), dict):
                section[k] = {}
            section = section[k]
        section[keys[-1]] = value

    def rate_limit(self, source: str) -> float:
        """Minimum seconds between requests for a source"""
        return float(self.get(f'api.{source}.rate_limit', 0.0))

    @property
    def spotify_client_id(self) -> Optional[str]:
        return self.get('spotify.client_id') or os.environ.get('SPOTIFY_CLIENT_ID')

    @property
    def spotify_client_secret(self) -> Optional[str]:
        return self.get('spotify.client_secret') or os.environ.get('SPOTIFY_CLIENT_SECRET')

    @property
    def spotify_configured(self) -> bool:
        return bool(self.spotify_client_id and self.spotify_client_secret)

    @property
    def default_source(self) -> str:
        return self.get('sources.default', 'spotify')

    @property
    def log_level(self) -> str:
        return self.get('logging.level', 'INFO')

    @property
    def log_file(self) -> Optional[str]:
        return self.get('logging.file')

    def __repr__(self) -> str:
        return f"ConfigManager(config={self.config_path})"
