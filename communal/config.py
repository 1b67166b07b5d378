"""Configuration management for the communal roster."""

import os
import json
import copy
from pathlib import Path
from typing import Optional, Dict, Any

from .errors import ErrorContext, ValidationError
from .models import Config


class ConfigManager:
    """Manages configuration loading and validation."""

    DEFAULT_CONFIG = {
        "detection": {
            "fuzzy_cutoff": 0.3,
            "min_match_length": 3,
            "similar_ratio": 0.7,
            "length_tolerance": 0.3,
        },
        "network": {
            "root_id": "root:community",
            "root_label": "Community",
        },
        "storage": {
            "path": "communal_data.json",
        },
        "logging": {
            "format": "text",
            "level": "INFO",
            "file": None,
        },
    }

    def __init__(self, config_path: Optional[str] = None):
        """Initialize config manager.

        Args:
            config_path: Path to config file. If None, uses defaults + env vars
        """
        self.config_path = Path(config_path) if config_path else None
        self._config: Optional[Config] = None

    def load(self) -> Config:
        """Load configuration from file and environment."""
        if self._config:
            return self._config

        # Start with defaults
        config_dict = copy.deepcopy(self.DEFAULT_CONFIG)

        # Load from file if provided
        if self.config_path and self.config_path.exists():
            try:
                with open(self.config_path, "r") as f:
                    file_config = json.load(f)
            except json.JSONDecodeError as e:
                raise ValidationError(
                    f"Invalid configuration file {self.config_path}: {e}",
                    field="config_path",
                    value=str(self.config_path),
                    context=ErrorContext(operation="load_config"),
                )
            config_dict = self._deep_merge(config_dict, file_config)

        # Override with environment variables
        config_dict = self._apply_env_overrides(config_dict)

        # Create and validate config model
        self._config = Config(**config_dict)
        return self._config

    def _deep_merge(self, base: Dict[str, Any], update: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in update.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides."""
        data_path = os.getenv("COMMUNAL_DATA_PATH")
        if data_path:
            config.setdefault("storage", {})["path"] = data_path

        root_label = os.getenv("COMMUNAL_ROOT_LABEL")
        if root_label:
            config.setdefault("network", {})["root_label"] = root_label

        log_level = os.getenv("COMMUNAL_LOG_LEVEL")
        if log_level:
            config.setdefault("logging", {})["level"] = log_level.upper()

        log_format = os.getenv("COMMUNAL_LOG_FORMAT")
        if log_format:
            config.setdefault("logging", {})["format"] = log_format.lower()

        fuzzy_cutoff = os.getenv("COMMUNAL_FUZZY_CUTOFF")
        if fuzzy_cutoff:
            try:
                config.setdefault("detection", {})["fuzzy_cutoff"] = float(fuzzy_cutoff)
            except ValueError:
                raise ValidationError(
                    f"COMMUNAL_FUZZY_CUTOFF must be a number, got {fuzzy_cutoff!r}",
                    field="fuzzy_cutoff",
                    value=fuzzy_cutoff,
                )

        return config

    def save_template(self, path: str):
        """Save a configuration template file."""
        with open(path, "w") as f:
            json.dump(self.DEFAULT_CONFIG, f, indent=2)
