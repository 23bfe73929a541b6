"""
Conch Configuration Loader

Configuration management for the interpreter:
- JSON configuration file loading
- Default value handling
- Runtime configuration updates through dot-notation keys
- Type-checked access to configuration values

Author: Conch Developers
Version: 1.0.0
"""

import json
import threading
from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Any, Optional

from conch.exceptions import ConfigValidationError


@dataclass
class ShellConfig:
    """Read-loop settings."""
    prompt: str = "conch$ "
    report_nonzero_status: bool = True
    exit_on_error: bool = False


@dataclass
class ExecutorConfig:
    """Process orchestration settings."""
    close_fds: bool = True
    background_new_session: bool = True
    file_mode: int = 0o644


@dataclass
class LoggingConfig:
    """Logging configuration settings."""
    level: str = "WARNING"
    log_file: Optional[str] = None
    console_output: bool = True
    use_colors: bool = True


@dataclass
class Config:
    """
    Main configuration container.

    Every section has defaults, so an empty or partial JSON file is a
    valid configuration.
    """
    shell: ShellConfig = field(default_factory=ShellConfig)
    executor: ExecutorConfig = field(default_factory=ExecutorConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


_SECTIONS = {
    'shell': ShellConfig,
    'executor': ExecutorConfig,
    'logging': LoggingConfig,
}


class ConfigLoader:
    """
    Configuration loader and manager.

    Example:
        >>> loader = ConfigLoader()
        >>> config = loader.load('conch.json')
        >>> config.shell.prompt
        'conch$ '
    """

    _instance: Optional['ConfigLoader'] = None
    _lock = threading.Lock()

    def __new__(cls) -> 'ConfigLoader':
        """Singleton pattern for configuration access."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._config = Config()
                cls._instance._loaded = False
            return cls._instance

    def load(self, config_path: str) -> Config:
        """
        Load configuration from a JSON file.

        Args:
            config_path: Path to the configuration file

        Returns:
            Config object with loaded settings

        Raises:
            ConfigValidationError: If the file cannot be read or parsed
        """
        path = Path(config_path)

        if not path.exists():
            raise ConfigValidationError(
                f"Configuration file not found: {config_path}"
            )

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(
                f"Invalid JSON in configuration file: {e}"
            ) from e
        except OSError as e:
            raise ConfigValidationError(
                f"Cannot read configuration file: {e}"
            ) from e

        self._config = self._parse_config(data)
        self._loaded = True
        return self._config

    def _parse_config(self, data: Any) -> Config:
        """Parse configuration data into a Config object."""
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration root must be an object")

        config = Config()

        for name, section_data in data.items():
            section_cls = _SECTIONS.get(name)
            if section_cls is None:
                raise ConfigValidationError(
                    f"Unknown configuration section: {name}", key=name
                )
            if not isinstance(section_data, dict):
                raise ConfigValidationError(
                    f"Configuration section must be an object: {name}", key=name
                )

            section = getattr(config, name)
            known = {f.name for f in fields(section_cls)}
            for key, value in section_data.items():
                if key not in known:
                    raise ConfigValidationError(
                        f"Unknown configuration key: {name}.{key}",
                        key=f"{name}.{key}"
                    )
                self._check_type(f"{name}.{key}", getattr(section, key), value)
                setattr(section, key, value)

        return config

    @staticmethod
    def _check_type(key: str, current: Any, value: Any) -> None:
        """Reject values whose type differs from the default's."""
        if current is None or value is None:
            return
        # bool is an int subclass; keep the two apart
        if isinstance(current, bool) != isinstance(value, bool):
            raise ConfigValidationError(
                f"Invalid type for {key}: {type(value).__name__}", key=key
            )
        if not isinstance(value, type(current)):
            raise ConfigValidationError(
                f"Invalid type for {key}: {type(value).__name__}", key=key
            )

    @property
    def config(self) -> Config:
        """Get the current configuration."""
        return self._config

    @property
    def loaded(self) -> bool:
        return self._loaded

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value by dot-notation key.

        Args:
            key: Dot-notation key (e.g., 'shell.prompt')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        obj: Any = self._config

        for part in key.split('.'):
            if hasattr(obj, part):
                obj = getattr(obj, part)
            else:
                return default

        return obj

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value at runtime.

        Changes are not persisted to disk.
        """
        parts = key.split('.')
        obj: Any = self._config

        for part in parts[:-1]:
            if hasattr(obj, part):
                obj = getattr(obj, part)
            else:
                raise ConfigValidationError(f"Invalid configuration key: {key}", key=key)

        final_key = parts[-1]
        if len(parts) < 2 or not hasattr(obj, final_key):
            raise ConfigValidationError(f"Invalid configuration key: {key}", key=key)

        self._check_type(key, getattr(obj, final_key), value)
        setattr(obj, final_key, value)

    def reset(self) -> None:
        """Drop any loaded configuration and return to defaults."""
        self._config = Config()
        self._loaded = False

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self._config)


def get_config() -> Config:
    """
    Get the global configuration instance.

    Returns:
        Config object with current settings
    """
    return ConfigLoader().config
