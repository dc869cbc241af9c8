"""Configuration for the OCR normalization pipeline.

Settings live in a YAML file and are validated with pydantic. Every
setting has a default, so a missing file is not an error.
"""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("configs/config.yaml")


class NormalizationConfig(BaseModel):
    """Search windows used by the text heuristics."""

    name_scan_lines: int = Field(default=10, ge=1)
    name_min_length: int = Field(default=4, ge=1)
    name_max_length: int = Field(default=49, ge=1)
    classifier_scan_lines: int = Field(default=50, ge=1)
    layouts_path: str = "configs/layouts.yaml"


class ServerConfig(BaseModel):
    """Bind address for the development API server."""

    host: str = "127.0.0.1"
    port: int = 8000


class AppConfig(BaseModel):
    """Top-level application configuration."""

    normalization: NormalizationConfig = Field(default_factory=NormalizationConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = DEFAULT_CONFIG_PATH

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
