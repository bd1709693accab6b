"""Configuration management for todotxt_manager."""

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .exceptions import ConfigError
from .task import SortOption

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "TODOTXT_CONFIG"
DEFAULT_DATA_DIR = "~/.todotxt"


@dataclass
class ConfigModel:
    """Global configuration."""

    data_dir: str = DEFAULT_DATA_DIR
    todo_file: str = "todo.txt"  # Relative paths resolve inside data_dir
    state_file: str = "state.yaml"

    default_sort: SortOption = SortOption.PRIORITY
    group_by_creation_date: bool = True  # Blank line between appended tasks of different dates
    add_creation_date: bool = True  # Stamp new tasks with today's date

    def __post_init__(self):
        self.data_dir = os.path.expanduser(self.data_dir)
        if not isinstance(self.default_sort, SortOption):
            try:
                self.default_sort = SortOption(self.default_sort)
            except ValueError as e:
                raise ConfigError(f"Invalid default_sort: {self.default_sort!r}") from e

    def _resolve(self, name: str) -> Path:
        path = Path(name).expanduser()
        return path if path.is_absolute() else Path(self.data_dir) / path

    def get_todo_path(self) -> Path:
        return self._resolve(self.todo_file)

    def get_state_path(self) -> Path:
        return self._resolve(self.state_file)

    def get_config_path(self) -> Path:
        return Path(self.data_dir) / "config.yaml"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data_dir": self.data_dir,
            "todo_file": self.todo_file,
            "state_file": self.state_file,
            "default_sort": self.default_sort.value,
            "group_by_creation_date": self.group_by_creation_date,
            "add_creation_date": self.add_creation_date,
        }

    def to_yaml(self) -> str:
        """Serialize config to YAML."""
        return yaml.safe_dump(self.to_dict(), default_flow_style=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "ConfigModel":
        """Deserialize config from YAML, ignoring unknown keys."""
        try:
            data = yaml.safe_load(yaml_str) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in configuration: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError("Configuration must be a mapping")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown configuration keys: {', '.join(unknown)}")
        return cls(**{key: value for key, value in data.items() if key in known})


class Config:
    """Configuration loader."""

    @staticmethod
    def default_path() -> Path:
        override = os.environ.get(CONFIG_ENV_VAR)
        if override:
            return Path(override).expanduser()
        return ConfigModel().get_config_path()

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> ConfigModel:
        """Load configuration from file, or defaults when the file is absent."""
        if config_path is None:
            config_path = cls.default_path()

        if not config_path.exists():
            logger.debug(f"No configuration at {config_path}, using defaults")
            return ConfigModel()

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config = ConfigModel.from_yaml(f.read())
        except OSError as e:
            raise ConfigError(f"Failed to read config from {config_path}: {e}") from e
        logger.debug(f"Loaded configuration from {config_path}")
        return config

    @classmethod
    def save(cls, config: ConfigModel, config_path: Optional[Path] = None):
        """Save configuration to file."""
        if config_path is None:
            config_path = config.get_config_path()

        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, "w", encoding="utf-8") as f:
                f.write(config.to_yaml())
        except OSError as e:
            raise ConfigError(f"Failed to save config to {config_path}: {e}") from e
        logger.info(f"Configuration saved to {config_path}")


def load_config(config_path: Optional[Path] = None) -> ConfigModel:
    """Load configuration from file."""
    return Config.load(config_path)


def save_config(config: ConfigModel, config_path: Optional[Path] = None):
    """Save configuration to file."""
    Config.save(config, config_path)
