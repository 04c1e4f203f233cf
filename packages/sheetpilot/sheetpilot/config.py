"""SheetPilot — Configuration.

Configuration is loaded from (in order of increasing priority):
    1. Built-in defaults (this file)
    2. Environment variables prefixed with SHEETPILOT_
    3. System config: /etc/sheetpilot/config.yaml
    4. User config:   ~/.sheetpilot/config.yaml
    5. Explicit config file passed to ``Settings.load()``

YAML blocks replace whole sections: a file that sets ``classifier:`` hides
any ``SHEETPILOT_CLASSIFIER__*`` variables.

Call ``Settings.load()`` once at startup and inject the instance through
FastAPI dependencies or the CLI.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# ---------------------------------------------------------------------------
# Sub-configuration blocks
# ---------------------------------------------------------------------------


class ServerConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = Field(default=3001, ge=1024, le=65535)
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed to call the API (the spreadsheet add-in runs in a webview).",
    )


class ClassifierConfig(BaseModel):
    backend: Literal["rules", "http"] = Field(
        default="rules",
        description="rules — in-process keyword rules. http — POST to a remote /analyze endpoint.",
    )
    url: str = Field(
        default="http://localhost:3001/analyze",
        description="Remote classifier endpoint (only used when backend='http').",
    )
    timeout_seconds: float | None = Field(
        default=None,
        description="HTTP timeout for the remote classifier. None = wait indefinitely.",
    )
    simulated_latency_seconds: Annotated[float, Field(ge=0.0, le=60.0)] = Field(
        default=0.0,
        description="Artificial delay before answering /analyze, to exercise slow-classifier UX.",
    )
    locale: Literal["en", "zh"] = Field(
        default="en",
        description="Display locale of the user-facing action descriptions.",
    )


class DocumentConfig(BaseModel):
    backend: Literal["workbook", "memory"] = Field(
        default="memory",
        description="workbook — an .xlsx file via openpyxl. memory — seeded in-memory table.",
    )
    workbook_path: Path | None = Field(
        default=None,
        description="Path to the .xlsx workbook (required when backend='workbook').",
    )
    sheet: str | None = Field(
        default=None,
        description="Worksheet holding the primary table. None = the active sheet.",
    )
    scratch_sheet: str = Field(
        default="__chart_data_temp",
        description="Reserved name of the hidden sheet that hosts numeric chart data.",
    )
    chart_top_left: str = "H5"
    chart_bottom_right: str = "M25"
    chart_title: str = "Sales (X) vs Costs (Y)"
    chart_series_name: str = "Sales vs Costs"

    @field_validator("workbook_path", mode="before")
    @classmethod
    def expand_workbook_path(cls, v: object) -> object:
        if isinstance(v, str):
            return Path(v).expanduser()
        return v


class LoggingConfig(BaseModel):
    level: Literal["debug", "info", "warning", "error", "critical"] = "info"
    format: Literal["json", "console"] = "console"
    file: Path | None = None


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SHEETPILOT_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    server: ServerConfig = Field(default_factory=ServerConfig)
    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    document: DocumentConfig = Field(default_factory=DocumentConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, config_file: Path | None = None) -> "Settings":
        """Load settings from YAML files + environment variables."""
        data: dict[str, object] = {}

        candidates = [
            Path("/etc/sheetpilot/config.yaml"),
            Path.home() / ".sheetpilot" / "config.yaml",
        ]
        if config_file:
            candidates.append(config_file)

        for path in candidates:
            if path.exists():
                import yaml

                with path.open() as f:
                    loaded = yaml.safe_load(f) or {}
                    data.update(loaded)

        return cls(**data)


# Module-level singleton, replaced by ``Settings.load()`` at startup.
_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def override_settings(settings: Settings) -> None:
    """Replace the module-level singleton. Used in tests."""
    global _settings
    _settings = settings
