"""
LAN Chat - Configuration Management

This module handles loading, merging, and managing configuration from
TOML files and environment variables. No configuration is required: a
missing file means defaults, which match the wire protocol every peer
uses.

Author: orpheus497
Version: 1.0.0
"""

import copy
import ipaddress
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

# Python 3.11+ has tomllib built-in, older versions need tomli
if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None

from .constants import (
    CONFIG_FILENAME,
    DEFAULT_DATA_DIR,
    DEFAULT_INTERFACE,
    ENV_PREFIX,
    MAX_PLAINTEXT_SIZE,
    MIN_RECEIVE_BUFFER_SIZE,
    MULTICAST_GROUP,
    MULTICAST_LOOPBACK,
    MULTICAST_PORT,
    MULTICAST_TTL,
    RECEIVE_BUFFER_SIZE,
    UI_COPY_LINES,
)
from .errors import ConfigError, ErrorCode

# Default configuration dictionary
DEFAULT_CONFIG: Dict[str, Any] = {
    "network": {
        "group": MULTICAST_GROUP,
        "port": MULTICAST_PORT,
        "interface": DEFAULT_INTERFACE,
        "ttl": MULTICAST_TTL,
        "loopback": MULTICAST_LOOPBACK,
        "buffer_size": RECEIVE_BUFFER_SIZE,
    },
    "limits": {
        "max_plaintext_size": MAX_PLAINTEXT_SIZE,
    },
    "ui": {
        "copy_lines": UI_COPY_LINES,
        "log_dir": ".",
    },
    "logging": {
        "level": "INFO",
        "file_logging": True,
        "file": "",
    },
}


class Config:
    """Configuration manager for LAN Chat.

    Loads configuration from TOML files, merges with defaults,
    and applies environment variable overrides. Provides a simple
    interface for accessing and updating configuration values.

    Attributes:
        config_path: Path to the configuration file
        data: Configuration dictionary
    """

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize configuration manager.

        Args:
            config_path: Path to configuration file (optional)
                If not provided, uses default location
        """
        if config_path is None:
            data_dir = Path(DEFAULT_DATA_DIR).expanduser()
            config_path = data_dir / CONFIG_FILENAME

        self.config_path = Path(config_path).expanduser()
        self.data = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from file and merge with defaults.

        Returns:
            Merged configuration dictionary

        Raises:
            ConfigError: If configuration loading or parsing fails
        """
        config = copy.deepcopy(DEFAULT_CONFIG)

        if self.config_path.exists():
            if tomllib is None:
                raise ConfigError(
                    ErrorCode.E701_CONFIG_LOAD_FAILED,
                    "TOML library not available. Install tomli for Python < 3.11",
                )

            try:
                with open(self.config_path, "rb") as f:
                    file_config = tomllib.load(f)
            except (OSError, tomllib.TOMLDecodeError) as e:
                raise ConfigError(
                    ErrorCode.E704_CONFIG_PARSE_ERROR,
                    f"Failed to parse configuration file: {e}",
                    {"path": str(self.config_path), "error": str(e)},
                ) from e

            config = self._merge_config(config, file_config)

        config = self._apply_env_overrides(config)

        return config

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge override config into base config.

        Args:
            base: Base configuration dictionary
            override: Override configuration dictionary

        Returns:
            Merged configuration dictionary
        """
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value

        return result

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides to configuration.

        Environment variables follow the pattern: LANCHAT_SECTION_KEY
        For example: LANCHAT_NETWORK_PORT=5454

        Args:
            config: Base configuration dictionary

        Returns:
            Configuration with environment overrides applied
        """
        result = copy.deepcopy(config)

        for section, settings in config.items():
            if not isinstance(settings, dict):
                continue

            for key in settings:
                env_var = f"{ENV_PREFIX}_{section.upper()}_{key.upper()}"
                env_value = os.environ.get(env_var)

                if env_value is None:
                    continue

                # Convert environment variable to the type of the existing value
                original_type = type(settings[key])
                try:
                    if original_type == bool:
                        result[section][key] = env_value.lower() in ("true", "1", "yes")
                    elif original_type == int:
                        result[section][key] = int(env_value)
                    elif original_type == float:
                        result[section][key] = float(env_value)
                    else:
                        result[section][key] = env_value
                except ValueError as e:
                    raise ConfigError(
                        ErrorCode.E703_INVALID_CONFIG,
                        f"Invalid value for {env_var}: {env_value!r}",
                        {"variable": env_var, "value": env_value},
                    ) from e

        return result

    def validate(self) -> None:
        """Check values that would break the wire protocol or the transport.

        Raises:
            ConfigError: If any value is out of range
        """
        port = self.get("network", "port")
        if not isinstance(port, int) or not 1 <= port <= 65535:
            raise ConfigError(ErrorCode.E703_INVALID_CONFIG, f"Invalid port: {port!r}")

        group = self.get("network", "group")
        try:
            if not ipaddress.IPv4Address(group).is_multicast:
                raise ValueError(group)
        except ValueError as e:
            raise ConfigError(
                ErrorCode.E703_INVALID_CONFIG, f"Invalid multicast group: {group!r}"
            ) from e

        buffer_size = self.get("network", "buffer_size")
        if not isinstance(buffer_size, int) or buffer_size < MIN_RECEIVE_BUFFER_SIZE:
            raise ConfigError(
                ErrorCode.E703_INVALID_CONFIG,
                f"buffer_size must be at least {MIN_RECEIVE_BUFFER_SIZE}",
            )

        max_plaintext = self.get("limits", "max_plaintext_size")
        if not isinstance(max_plaintext, int) or not 0 < max_plaintext <= MAX_PLAINTEXT_SIZE:
            raise ConfigError(
                ErrorCode.E703_INVALID_CONFIG,
                f"max_plaintext_size must be between 1 and {MAX_PLAINTEXT_SIZE}",
            )

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """Get a configuration value.

        Args:
            section: Configuration section name
            key: Configuration key name
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        return self.data.get(section, {}).get(key, default)

    def set(self, section: str, key: str, value: Any) -> None:
        """Set a configuration value.

        Args:
            section: Configuration section name
            key: Configuration key name
            value: Value to set
        """
        if section not in self.data:
            self.data[section] = {}

        self.data[section][key] = value

    def save(self) -> None:
        """Save current configuration to file.

        Raises:
            ConfigError: If saving fails
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

            with open(self.config_path, "w") as f:
                self._write_toml(f, self.data)

        except OSError as e:
            raise ConfigError(
                ErrorCode.E702_CONFIG_SAVE_FAILED,
                f"Failed to save configuration: {e}",
                {"path": str(self.config_path), "error": str(e)},
            ) from e

    def _write_toml(self, file, data: Dict[str, Any]) -> None:
        """Write configuration data as TOML format.

        Args:
            file: File object to write to
            data: Configuration data to write
        """
        for section, settings in data.items():
            if isinstance(settings, dict):
                file.write(f"[{section}]\n")
                for key, value in settings.items():
                    if isinstance(value, bool):
                        file.write(f"{key} = {str(value).lower()}\n")
                    elif isinstance(value, (int, float)):
                        file.write(f"{key} = {value}\n")
                    elif isinstance(value, str):
                        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
                        file.write(f'{key} = "{escaped}"\n')
                file.write("\n")

    def to_dict(self) -> Dict[str, Any]:
        """Get configuration as dictionary.

        Returns:
            Configuration dictionary
        """
        return copy.deepcopy(self.data)
