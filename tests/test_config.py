"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from crewbooks_ocr.utils.config import (
    AppConfig,
    NormalizationConfig,
    ServerConfig,
    load_config,
)


class TestNormalizationConfig:
    """Tests for NormalizationConfig defaults and overrides."""

    def test_defaults(self) -> None:
        cfg = NormalizationConfig()
        assert cfg.name_scan_lines == 10
        assert cfg.name_min_length == 4
        assert cfg.name_max_length == 49
        assert cfg.classifier_scan_lines == 50
        assert cfg.layouts_path == "configs/layouts.yaml"

    def test_override(self) -> None:
        cfg = NormalizationConfig(name_scan_lines=5, classifier_scan_lines=20)
        assert cfg.name_scan_lines == 5
        assert cfg.classifier_scan_lines == 20

    def test_rejects_non_positive_window(self) -> None:
        with pytest.raises(ValidationError):
            NormalizationConfig(name_scan_lines=0)


class TestServerConfig:
    """Tests for ServerConfig defaults."""

    def test_defaults(self) -> None:
        cfg = ServerConfig()
        assert cfg.host == "127.0.0.1"
        assert cfg.port == 8000


class TestAppConfig:
    """Tests for the top-level AppConfig."""

    def test_defaults(self) -> None:
        cfg = AppConfig()
        assert isinstance(cfg.normalization, NormalizationConfig)
        assert isinstance(cfg.server, ServerConfig)
        assert cfg.log_level == "INFO"

    def test_nested_override(self) -> None:
        cfg = AppConfig(
            normalization=NormalizationConfig(name_max_length=30),
            log_level="DEBUG",
        )
        assert cfg.normalization.name_max_length == 30
        assert cfg.log_level == "DEBUG"


class TestLoadConfig:
    """Tests for the load_config function."""

    def test_load_shipped_config(self, config_dir: Path) -> None:
        cfg = load_config(config_dir / "config.yaml")
        assert cfg == AppConfig()

    def test_load_missing_file_returns_defaults(self) -> None:
        cfg = load_config(Path("/nonexistent/path/config.yaml"))
        assert cfg == AppConfig()

    def test_load_custom_yaml(self, tmp_path: Path) -> None:
        config_data = {
            "normalization": {"name_scan_lines": 3, "layouts_path": "x.yaml"},
            "server": {"port": 9000},
            "log_level": "DEBUG",
        }
        config_file = tmp_path / "config.yaml"
        with open(config_file, "w") as f:
            yaml.dump(config_data, f)

        cfg = load_config(config_file)
        assert cfg.normalization.name_scan_lines == 3
        assert cfg.normalization.layouts_path == "x.yaml"
        assert cfg.normalization.name_max_length == 49
        assert cfg.server.port == 9000
        assert cfg.log_level == "DEBUG"

    def test_load_empty_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        cfg = load_config(config_file)
        assert isinstance(cfg, AppConfig)

    def test_load_none_defaults_to_standard_path(self) -> None:
        cfg = load_config()
        assert isinstance(cfg, AppConfig)
