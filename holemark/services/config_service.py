"""
Configuration service for HoleMark.

This module handles loading, saving, and managing application settings.
Configuration is stored as JSON in ~/.config/holemark/config.json following
the XDG Base Directory Specification.
"""

import copy
import json
from pathlib import Path
from typing import Any, Dict, Optional

from holemark.services.logging_service import get_logger

DEFAULT_CONFIG_DIR = Path.home() / ".config" / "holemark"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.json"

DEFAULT_CONFIG: Dict[str, Any] = {
    "theme": "dark",
    # Logging level name, applied once the config is loaded
    "log_level": "INFO",
    # Where exported images and CSV results go by default
    "default_export_folder": str(Path.home() / "Pictures" / "HoleMark"),
    "jpeg_quality": 92,
    # Upper bound for either side of the offscreen render buffer
    "max_buffer_dimension": 4096,
    # Initial values for the measurement settings panel.
    # Units use the short names understood by holemark.core.units.
    "measurement": {
        "reference_length": 1.0,
        "reference_unit": "in",
        "bullet_diameter": 0.308,
        "bullet_unit": "in",
        "target_distance": 100.0,
        "target_distance_unit": "yd",
        "result_unit": "in",
        "angular_unit": "MOA",
    },
}


class ConfigService:
    """
    Service for managing application configuration.

    Handles loading, saving, and accessing configuration values.
    Provides sensible defaults when config file is missing or corrupted.
    """

    def __init__(self, config_path: Optional[Path] = None) -> None:
        """
        Initialize the ConfigService.

        Args:
            config_path: Optional path to config file. Defaults to
                        ~/.config/holemark/config.json
        """
        self._logger = get_logger(__name__)
        self._config_path = config_path or DEFAULT_CONFIG_FILE
        self._config: Dict[str, Any] = {}

        self._load()

    @property
    def path(self) -> Path:
        return self._config_path

    def _load(self) -> None:
        """Load configuration from file, using defaults if needed."""
        self._config = copy.deepcopy(DEFAULT_CONFIG)

        if not self._config_path.exists():
            self._logger.info(
                f"Config file not found at {self._config_path}. Using defaults."
            )
            self._save_to_file()
            return

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                loaded_config = json.load(f)

            if isinstance(loaded_config, dict):
                self._deep_merge(self._config, loaded_config)
                self._logger.info(f"Configuration loaded from {self._config_path}")
                # Persist any default keys the file was missing
                self._save_to_file()
            else:
                raise ValueError("Config file does not contain a valid JSON object")

        except (json.JSONDecodeError, ValueError) as e:
            self._logger.warning(
                f"Config file corrupted or invalid: {e}. Recreating with defaults."
            )
            self._config = copy.deepcopy(DEFAULT_CONFIG)
            self._save_to_file()

        except OSError as e:
            self._logger.warning(
                f"Could not read config file: {e}. Using defaults."
            )

    def _deep_merge(self, base: Dict, override: Dict) -> None:
        """Recursively merge override dict into base dict."""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def _save_to_file(self) -> None:
        """Save current configuration to file."""
        try:
            self._config_path.parent.mkdir(parents=True, exist_ok=True)

            with open(self._config_path, "w", encoding="utf-8") as f:
                json.dump(self._config, f, indent=2)

            self._logger.debug(f"Configuration saved to {self._config_path}")

        except OSError as e:
            self._logger.error(f"Could not save config file: {e}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: The configuration key to retrieve.
            default: Default value if key doesn't exist.

        Returns:
            The configuration value, or default if not found.
        """
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value (in memory only).

        Call save() to persist changes to disk.
        """
        self._config[key] = value
        self._logger.debug(f"Config key '{key}' set to '{value}'")

    def save(self) -> None:
        """Persist current configuration to disk."""
        self._save_to_file()

    # ─── Application Settings ─────────────────────────────────────────────

    @property
    def theme(self) -> str:
        return self.get("theme", "dark")

    @property
    def log_level(self) -> str:
        return str(self.get("log_level", DEFAULT_CONFIG["log_level"]))

    @property
    def default_export_folder(self) -> str:
        return self.get("default_export_folder", DEFAULT_CONFIG["default_export_folder"])

    @property
    def jpeg_quality(self) -> int:
        return int(self.get("jpeg_quality", DEFAULT_CONFIG["jpeg_quality"]))

    @property
    def max_buffer_dimension(self) -> int:
        return int(self.get("max_buffer_dimension", DEFAULT_CONFIG["max_buffer_dimension"]))

    # ─── Measurement Settings ─────────────────────────────────────────────

    @property
    def measurement(self) -> Dict[str, Any]:
        """Get the stored measurement settings (reference, bullet, distance, units)."""
        return self.get("measurement", copy.deepcopy(DEFAULT_CONFIG["measurement"]))

    def set_measurement(self, values: Dict[str, Any]) -> None:
        """Replace the stored measurement settings (in memory only)."""
        self.set("measurement", dict(values))
