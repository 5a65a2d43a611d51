"""
Settings - User configuration stored as JSON.

Settings live in ~/.config/instafilter/settings.json. A missing or
unreadable file falls back to the defaults.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

from instafilter.core.errors import ConfigError
from instafilter.core.parameters import ParameterName
from instafilter.output.sinks import DEFAULT_OUTPUT_DIR, IMAGE_FORMATS

logger = logging.getLogger(__name__)

CONFIG_PATH = Path.home() / ".config" / "instafilter" / "settings.json"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Settings:
    """Configuration for the filter engine and its hosts."""
    output_dir: str = str(DEFAULT_OUTPUT_DIR)
    image_format: str = "PNG"
    thumbnail_size: int = 256
    default_filter: str = "SepiaTone"

    # Initial slider values
    intensity: float = ParameterName.INTENSITY.default
    radius: float = ParameterName.RADIUS.default
    scale: float = ParameterName.SCALE.default

    # Maximum cached render results (0 disables caching)
    cache_size: int = 8
    log_level: str = "WARNING"

    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def output_path(self) -> Path:
        return Path(self.output_dir).expanduser()

    def parameter_defaults(self) -> dict[ParameterName, float]:
        return {
            ParameterName.INTENSITY: self.intensity,
            ParameterName.RADIUS: self.radius,
            ParameterName.SCALE: self.scale,
        }

    def validate(self) -> None:
        """
        Check values that cannot be used as-is.

        Raises:
            ConfigError: On the first invalid value
        """
        if self.image_format.upper() not in IMAGE_FORMATS:
            raise ConfigError(f"Unsupported image format: {self.image_format}")
        if self.thumbnail_size < 1:
            raise ConfigError("thumbnail_size must be positive")
        if self.cache_size < 0:
            raise ConfigError("cache_size must be >= 0")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigError(f"Unknown log level: {self.log_level}")

        from instafilter.filters.catalog import get_catalog

        try:
            get_catalog().kind_from_name(self.default_filter)
        except ValueError as e:
            raise ConfigError(str(e)) from e


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from file, falling back to defaults."""
    if path is None:
        path = CONFIG_PATH

    if not path.exists():
        return Settings()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("settings file must contain a JSON object")

        known = {f.name for f in fields(Settings)}
        settings = Settings(**{k: v for k, v in data.items() if k in known})
        settings.validate()
        return settings

    except (OSError, ValueError, TypeError, ConfigError) as e:
        logger.warning(f"Failed to load settings from {path}: {e}")
        return Settings()


def save_settings(settings: Settings, path: Path | None = None) -> Path:
    """Save settings to file."""
    if path is None:
        path = CONFIG_PATH

    settings.validate()

    # Ensure directory exists
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(asdict(settings), f, indent=2)

    return path
