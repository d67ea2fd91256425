"""
Configuration management with YAML loading and environment variable support.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .constants import EXIFTOOL_BATCH_SIZE
from .exiftool import DEFAULT_EXIFTOOL

SECTIONS = ["paths", "exiftool", "processing", "logging"]

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env_path(env_var: str, default: Path | None = None) -> Path | None:
    """Get path from environment variable or return default."""
    if value := os.environ.get(env_var):
        return Path(value)
    return default


@dataclass
class PathsConfig:
    """Source and target directories - can be overridden via environment variables."""

    source: Path | None = field(default_factory=lambda: _env_path("ORGANIZE_MEDIA_SOURCE"))
    target: Path | None = field(default_factory=lambda: _env_path("ORGANIZE_MEDIA_TARGET"))


@dataclass
class ExifToolConfig:
    path: str = field(default_factory=lambda: os.environ.get("ORGANIZE_MEDIA_EXIFTOOL", DEFAULT_EXIFTOOL))
    batch_size: int = EXIFTOOL_BATCH_SIZE


@dataclass
class ProcessingConfig:
    recover_date: bool = False
    parallel_jobs: int = 1


@dataclass
class LoggingConfig:
    level: str = "WARNING"
    file: Path | None = None


@dataclass
class AppConfig:
    paths: PathsConfig = field(default_factory=PathsConfig)
    exiftool: ExifToolConfig = field(default_factory=ExifToolConfig)
    processing: ProcessingConfig = field(default_factory=ProcessingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> "AppConfig":
        """Load configuration from YAML file."""
        if not path.exists():
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict) -> "AppConfig":
        """Create config from dictionary; unknown sections and keys are ignored."""
        config = cls()

        for attr in SECTIONS:
            section_data = data.get(attr) or {}
            section = getattr(config, attr)
            for key, value in section_data.items():
                if not hasattr(section, key):
                    continue
                if key in ("source", "target", "file") and isinstance(value, str):
                    value = Path(value)
                setattr(section, key, value)

        return config

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        result = {}
        for attr in SECTIONS:
            section = getattr(self, attr)
            result[attr] = {
                key: str(value) if isinstance(value, Path) else value for key, value in vars(section).items()
            }
        return result


def _get_default_config_dir() -> Path:
    """Get default config directory."""
    if config_dir := os.environ.get("ORGANIZE_MEDIA_CONFIG_DIR"):
        return Path(config_dir)

    if xdg_config := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_config) / "organize-media"

    return Path.home() / ".config" / "organize-media"


def load_config(config_path: Path | None = None, config_dir: Path | None = None) -> AppConfig:
    """
    Load configuration.

    Args:
        config_path: Path to config file (default: searches standard locations)
        config_dir: Directory searched for config.yaml

    Returns:
        AppConfig (defaults if no file is found)
    """
    if config_dir is None:
        config_dir = _get_default_config_dir()

    if config_path is None:
        search_paths = [
            config_dir / "config.yaml",
            Path.cwd() / "organize-media.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = path
                break

    return AppConfig.from_yaml(config_path) if config_path else AppConfig()


def validate_config(config: AppConfig) -> list[str]:
    """
    Validate configured values.

    Returns:
        List of error messages (empty if valid)
    """
    errors = []
    if config.exiftool.batch_size < 1:
        errors.append(f"exiftool.batch_size must be positive: {config.exiftool.batch_size}")
    if config.processing.parallel_jobs < 1:
        errors.append(f"processing.parallel_jobs must be positive: {config.processing.parallel_jobs}")
    if str(config.logging.level).upper() not in LOG_LEVELS:
        errors.append(f"logging.level must be one of {', '.join(LOG_LEVELS)}: {config.logging.level}")
    return errors
