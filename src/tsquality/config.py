"""
Configuration loading and validation for the tsquality package.

Loads a YAML configuration file with sensible defaults.
"""

import copy
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from tsquality.thresholds import DetectionSettings, QualityThresholds


CONFIG_FILENAME = "tsquality.yaml"

# Default configuration values (fallback if file not found)
DEFAULT_CONFIG = {
    "detection": {
        "window_size": 10,
        "redundancy_ratio": 0.5,
        "gap_ratio": 2.0,
        "outlier_k": 3.0,
        "mad_scale": 1.4826,
    },
    "thresholds": {
        "completeness_min": 0.95,
        "consistency_min": 0.95,
        "timeliness_min": 0.95,
        "validity_min": 0.9,
        "amber_margin": 0.05,
    },
    "csv": {
        "header": True,
        "separator": ",",
        "convert_dates": True,
    },
    "processing": {
        "max_workers": 1,
        "max_series_length": None,
    },
}


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep merge two dictionaries, with override taking precedence.

    Args:
        base: Base dictionary
        override: Override dictionary (takes precedence)

    Returns:
        Merged dictionary
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_yaml_file(file_path: Path) -> Dict[str, Any]:
    """
    Load a YAML file and return its contents as a dictionary.

    Args:
        file_path: Path to YAML file

    Returns:
        Dictionary with YAML contents

    Raises:
        FileNotFoundError: If file doesn't exist
        yaml.YAMLError: If file is not valid YAML
        ValueError: If the document is not a mapping
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    with open(file_path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f)

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError(f"Configuration file must contain a mapping: {file_path}")
    return config


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file with fallback to defaults.

    Args:
        config_path: Path to a config file, or a directory containing
            ``tsquality.yaml`` (default: ./config)

    Returns:
        Configuration dictionary

    Example:
        >>> config = load_config(Path("config"))
        >>> config["detection"]["window_size"]
        10
    """
    if config_path is None:
        config_path = Path("config")
    config_path = Path(config_path)

    if config_path.is_dir():
        config_path = config_path / CONFIG_FILENAME

    try:
        user_config = load_yaml_file(config_path)
        config = deep_merge(copy.deepcopy(DEFAULT_CONFIG), user_config)
    except FileNotFoundError:
        config = copy.deepcopy(DEFAULT_CONFIG)

    return config


class Config:
    """
    Configuration manager for tsquality.

    Provides typed access to each configuration section.
    """

    def __init__(
        self,
        config_path: Optional[Path] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize configuration manager.

        Args:
            config_path: Config file or directory (default: ./config)
            overrides: Nested dictionary merged over the loaded file
        """
        self.config_path = Path(config_path) if config_path else Path("config")
        self.overrides = overrides or {}
        self._config: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "Config":
        """Build a configuration from a dictionary without reading any file."""
        instance = cls()
        instance._config = deep_merge(copy.deepcopy(DEFAULT_CONFIG), config)
        return instance

    @property
    def data(self) -> Dict[str, Any]:
        """Get the merged configuration (lazy load)."""
        if self._config is None:
            self._config = deep_merge(load_config(self.config_path), self.overrides)
        return self._config

    @property
    def detection(self) -> DetectionSettings:
        return DetectionSettings.from_dict(self.data["detection"])

    @property
    def thresholds(self) -> QualityThresholds:
        return QualityThresholds.from_dict(self.data["thresholds"])

    @property
    def csv(self) -> Dict[str, Any]:
        return self.data["csv"]

    @property
    def processing(self) -> Dict[str, Any]:
        return self.data["processing"]

    def reload(self) -> None:
        """Reload configuration from disk."""
        self._config = None

    def get(self, *keys: str, default: Any = None) -> Any:
        """
        Get a nested configuration value by key path.

        Args:
            *keys: Keys to traverse (e.g., "detection", "window_size")
            default: Default value if key path not found

        Returns:
            Configuration value or default

        Example:
            >>> config = Config()
            >>> config.get("csv", "separator")
            ','
        """
        value = self.data
        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value
