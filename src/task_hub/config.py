"""Configuration management for Task Hub."""

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .query_engine import ALL, QueryParams, parse_quick_filter, parse_sort_key

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "TASK_HUB_CONFIG"
DEFAULT_CONFIG_PATH = "~/.task_hub/config.yaml"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ConfigModel:
    """Global configuration model for Task Hub."""

    # Vault
    vault_dir: str = "."

    # Display preferences
    show_file_path: bool = True
    show_due_only: bool = False

    # Initial query
    default_status: str = ALL
    default_priority: str = ALL
    default_sort: str = "Due"
    default_quick: str = "all"

    # Behavior settings
    scan_workers: int = 4
    log_level: str = "WARNING"

    def __post_init__(self):
        """Validate values, falling back to defaults."""
        try:
            parse_sort_key(self.default_sort)
        except ValueError as e:
            logger.warning(f"{e}; using 'Due'")
            self.default_sort = "Due"

        try:
            parse_quick_filter(self.default_quick)
        except ValueError as e:
            logger.warning(f"{e}; using 'all'")
            self.default_quick = "all"

        if not isinstance(self.scan_workers, int) or self.scan_workers < 1:
            logger.warning(f"Invalid scan_workers {self.scan_workers!r}; using 4")
            self.scan_workers = 4

        self.log_level = str(self.log_level).upper()
        if self.log_level not in LOG_LEVELS:
            logger.warning(f"Invalid log_level {self.log_level!r}; using WARNING")
            self.log_level = "WARNING"

    @property
    def vault_path(self) -> Path:
        return Path(os.path.expanduser(self.vault_dir))

    def query_params(self) -> QueryParams:
        """Initial query built from the defaults."""
        return QueryParams(
            status=self.default_status,
            priority=self.default_priority,
            quick=parse_quick_filter(self.default_quick),
            sort=parse_sort_key(self.default_sort),
            due_only=self.show_due_only,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def to_yaml(self) -> str:
        """Serialize config to YAML."""
        return yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ConfigModel":
        data = dict(data or {})
        known = {f.name for f in fields(cls)}
        for key in sorted(set(data) - known):
            logger.warning(f"Ignoring unknown config key: {key}")
            del data[key]
        return cls(**data)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "ConfigModel":
        """Deserialize config from YAML."""
        data = yaml.safe_load(yaml_str)
        if data is not None and not isinstance(data, dict):
            raise ValueError("Configuration must be a YAML mapping")
        return cls.from_dict(data)

    def set_value(self, key: str, raw: str) -> None:
        """Set a field from its command line string form."""
        field_types = {f.name: f.type for f in fields(self)}
        if key not in field_types:
            raise KeyError(f"Unknown config key: {key}")

        current = getattr(self, key)
        if isinstance(current, bool):
            lowered = raw.strip().lower()
            if lowered in ("true", "yes", "on", "1"):
                value = True
            elif lowered in ("false", "no", "off", "0"):
                value = False
            else:
                raise ValueError(f"Expected a boolean for {key}, got {raw!r}")
        elif isinstance(current, int):
            value = int(raw)
        else:
            value = raw

        setattr(self, key, value)
        self.__post_init__()


def get_config_path(config_path: Optional[Path] = None) -> Path:
    """Resolve the config file path: argument, environment, then default."""
    if config_path is not None:
        return Path(config_path).expanduser()
    return Path(os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH)).expanduser()


class Config:
    """Configuration manager for Task Hub."""

    _instance: Optional[ConfigModel] = None
    _path: Optional[Path] = None

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> ConfigModel:
        """Load configuration from file or fall back to defaults."""
        path = get_config_path(config_path)
        config = ConfigModel()

        if path.exists():
            try:
                config = ConfigModel.from_yaml(path.read_text(encoding="utf-8"))
                logger.debug(f"Loaded configuration from {path}")
            except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
                logger.warning(f"Failed to load config from {path}: {e}; using defaults")
        else:
            logger.debug(f"No configuration at {path}; using defaults")

        cls._instance = config
        cls._path = path
        return config

    @classmethod
    def save(cls, config: ConfigModel, config_path: Optional[Path] = None) -> Path:
        """Save configuration to file."""
        path = get_config_path(config_path or cls._path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(config.to_yaml(), encoding="utf-8")
        logger.info(f"Configuration saved to {path}")
        cls._instance = config
        cls._path = path
        return path

    @classmethod
    def get(cls) -> ConfigModel:
        """Get the current configuration instance."""
        if cls._instance is None:
            cls.load()
        return cls._instance

    @classmethod
    def reload(cls) -> ConfigModel:
        """Reload configuration from file."""
        path = cls._path
        cls._instance = None
        return cls.load(path)

    @classmethod
    def reset(cls) -> None:
        """Forget the loaded configuration (useful for testing)."""
        cls._instance = None
        cls._path = None


def get_config() -> ConfigModel:
    """Get the current configuration."""
    return Config.get()


def load_config(config_path: Optional[Path] = None) -> ConfigModel:
    """Load configuration from file."""
    return Config.load(config_path)


def save_config(config: ConfigModel, config_path: Optional[Path] = None) -> Path:
    """Save configuration to file."""
    return Config.save(config, config_path)
