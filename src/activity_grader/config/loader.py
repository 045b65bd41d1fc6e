"""Configuration loader for portal and grading settings."""

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from ..utils.logging import get_logger
from .models import PortalConfig

logger = get_logger(__name__)

DEFAULT_CONFIG_FILE = "grader.yml"


class ConfigLoader:
    """Loads configuration from YAML and overlays environment variables."""

    def __init__(self, config_dir: Path | None = None):
        """Initialize the config loader.

        Args:
            config_dir: Directory containing config files. Defaults to cwd.
        """
        self.config_dir = config_dir or Path.cwd()

    def load(self, config_file: str | Path | None = None) -> PortalConfig:
        """Load the grader configuration.

        A missing default config file is not an error; an explicitly
        requested one is.

        Args:
            config_file: Path to the YAML file

        Returns:
            Parsed PortalConfig with environment overrides applied
        """
        load_dotenv()

        if config_file is None:
            path = self._resolve_path(DEFAULT_CONFIG_FILE)
            data = self._load_yaml(path) if path.exists() else {}
        else:
            data = self._load_yaml(self._resolve_path(config_file))

        config = PortalConfig.from_dict(data)
        self._apply_env(config)
        return config

    def _apply_env(self, config: PortalConfig) -> None:
        """Apply PORTAL_* environment overrides."""
        url = os.getenv("PORTAL_URL")
        if url:
            config.backend.url = url
        teacher = os.getenv("PORTAL_TEACHER_NAME")
        if teacher:
            config.report.teacher_name = teacher

    def _resolve_path(self, file_path: str | Path) -> Path:
        """Resolve a config file path."""
        path = Path(file_path).expanduser()
        if not path.is_absolute():
            path = self.config_dir / path
        return path

    def _load_yaml(self, path: Path) -> dict[str, Any]:
        """Load and parse a YAML file."""
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        logger.debug(f"Loading config from {path}")
        with open(path, encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
