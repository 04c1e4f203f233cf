"""Unit tests — Settings loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from sheetpilot.config import ClassifierConfig, DocumentConfig, Settings, get_settings, override_settings


@pytest.mark.unit
class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.server.port == 3001
        assert settings.classifier.backend == "rules"
        assert settings.classifier.timeout_seconds is None
        assert settings.classifier.locale == "en"
        assert settings.document.backend == "memory"
        assert settings.document.scratch_sheet == "__chart_data_temp"
        assert (settings.document.chart_top_left, settings.document.chart_bottom_right) == ("H5", "M25")

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SHEETPILOT_CLASSIFIER__BACKEND", "http")
        monkeypatch.setenv("SHEETPILOT_SERVER__PORT", "4010")
        settings = Settings()
        assert settings.classifier.backend == "http"
        assert settings.server.port == 4010

    def test_yaml_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "classifier:\n  locale: zh\n  simulated_latency_seconds: 3\n"
            "document:\n  backend: workbook\n  workbook_path: ~/book.xlsx\n"
        )
        settings = Settings.load(config_file=config_file)
        assert settings.classifier.locale == "zh"
        assert settings.classifier.simulated_latency_seconds == 3
        assert settings.document.backend == "workbook"
        assert settings.document.workbook_path == Path("~/book.xlsx").expanduser()

    def test_missing_config_file_is_ignored(self, tmp_path: Path) -> None:
        settings = Settings.load(config_file=tmp_path / "absent.yaml")
        assert settings.server.port == 3001

    def test_invalid_values_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ClassifierConfig(backend="neural")  # type: ignore[arg-type]
        with pytest.raises(ValidationError):
            ClassifierConfig(simulated_latency_seconds=-1)
        with pytest.raises(ValidationError):
            DocumentConfig(backend="cloud")  # type: ignore[arg-type]

    def test_override_singleton(self) -> None:
        settings = Settings(server={"port": 5000})
        override_settings(settings)
        assert get_settings() is settings
