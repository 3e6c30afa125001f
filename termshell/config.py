"""
Configuration management for termshell.
Handles loading, saving, and accessing configuration from a JSON file and environment variables.
"""
import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Optional

from .constants import (
    CONFIG_FILE,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PROMPT,
    STATE_DB,
    WORKSPACE_DIR,
)


logger = logging.getLogger(__name__)


@dataclass
class ShellConfig:
    """Shell configuration."""
    log_level: str = DEFAULT_LOG_LEVEL
    state_db: str = str(STATE_DB)
    workspace_dir: str = str(WORKSPACE_DIR)
    prompt: str = DEFAULT_PROMPT
    enable_filesystem: bool = True
    show_welcome: bool = True


ENV_OVERRIDES = {
    'TERMSHELL_LOG_LEVEL': 'log_level',
    'TERMSHELL_STATE_DB': 'state_db',
    'TERMSHELL_WORKSPACE': 'workspace_dir',
}


class ConfigManager:
    """
    Manages shell configuration with support for a JSON file and environment variables.

    Environment variables take precedence over config file values.
    """

    def __init__(self, config_file: Optional[Path] = None) -> None:
        self._config_file = Path(config_file) if config_file else CONFIG_FILE
        self._config = ShellConfig()
        self._load_config()
        self._load_env_vars()

    def _load_config(self) -> None:
        """Load configuration from JSON file."""
        if not self._config_file.exists():
            return

        try:
            with open(self._config_file, 'r', encoding='utf-8') as f:
                data = json.load(f)

            known = {f.name for f in fields(ShellConfig)}
            self._config = ShellConfig(**{k: v for k, v in data.items() if k in known})
        except (json.JSONDecodeError, TypeError, AttributeError) as e:
            logger.warning(f"Failed to load config file {self._config_file}: {e}")
            self._config = ShellConfig()

    def _load_env_vars(self) -> None:
        """Apply environment variable overrides."""
        for env_key, attr in ENV_OVERRIDES.items():
            value = os.environ.get(env_key)
            if value:
                setattr(self._config, attr, value)

    def _save_config(self) -> None:
        """Save current configuration to JSON file."""
        self._config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self._config_file, 'w', encoding='utf-8') as f:
            json.dump(asdict(self._config), f, indent=2)

    @property
    def config(self) -> ShellConfig:
        """Get the current configuration."""
        return self._config

    @property
    def config_file(self) -> Path:
        return self._config_file

    def update(self, **kwargs: Any) -> None:
        """Update configuration values and save."""
        for key, value in kwargs.items():
            if hasattr(self._config, key):
                setattr(self._config, key, value)
        self._save_config()

    def save(self) -> None:
        """Explicitly save configuration."""
        self._save_config()

    def reload(self) -> None:
        """Reload configuration from file."""
        self._config = ShellConfig()
        self._load_config()
        self._load_env_vars()

    def reset(self) -> None:
        """Reset configuration to defaults."""
        self._config = ShellConfig()
        self._save_config()


_config: Optional[ConfigManager] = None


def get_config(config_file: Optional[Path] = None) -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config
    if _config is None or config_file is not None:
        _config = ConfigManager(config_file)
    return _config
