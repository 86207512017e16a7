"""Pydantic settings for configuration management."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import yaml


class ApiConfig(BaseSettings):
    """Screener backend API configuration."""

    model_config = SettingsConfigDict(env_prefix="SCREENER_API_")

    base_url: str = Field(
        default="http://127.0.0.1:8000",
        description="Screener backend base URL",
    )
    indicators_path: str = Field(
        default="/metadata/indicators",
        description="Path of the indicator catalog endpoint",
    )
    apply_filters_path: str = Field(
        default="/filters/apply",
        description="Path of the filter matching endpoint",
    )
    timeout: float = Field(default=30.0, description="HTTP request timeout in seconds")
    connect_timeout: float = Field(default=5.0, description="HTTP connect timeout in seconds")

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the base URL so paths can be appended directly."""
        return v.rstrip("/")

    @property
    def indicators_url(self) -> str:
        """Full URL of the indicator catalog endpoint."""
        return f"{self.base_url}{self.indicators_path}"

    @property
    def apply_filters_url(self) -> str:
        """Full URL of the filter matching endpoint."""
        return f"{self.base_url}{self.apply_filters_path}"


class ScanConfig(BaseSettings):
    """Scan session and editor behaviour."""

    model_config = SettingsConfigDict(env_prefix="SCAN_")

    page_size: int = Field(default=50, ge=1, description="Rows requested per page")
    scroll_threshold: int = Field(
        default=80,
        ge=0,
        description="Distance from the bottom (px) that triggers the next page",
    )
    edit_mode: Literal["immediate", "commit"] = Field(
        default="commit",
        description=(
            "Operand panel behaviour: 'immediate' applies every field edit, "
            "'commit' buffers edits until save"
        ),
    )
    discard_stale_pages: bool = Field(
        default=True,
        description="Drop responses that arrive after the session was reset",
    )
    default_timeframe: Literal["1D", "1W"] = Field(
        default="1D",
        description="Timeframe used for new workspaces",
    )


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO", description="Log level")
    format: Literal["json", "text"] = Field(
        default="json",
        description="Log format",
    )
    file: Path | None = Field(
        default=None,
        description="Log file path (None for stdout only)",
    )
    rotate_size_mb: int = Field(
        default=10,
        description="Log file rotation size in MB",
    )
    retain_count: int = Field(
        default=5,
        description="Number of rotated log files to retain",
    )


class Settings(BaseSettings):
    """Main settings class combining all configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api: ApiConfig = Field(default_factory=ApiConfig)
    scan: ScanConfig = Field(default_factory=ScanConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Settings instance
        """
        path = Path(path)
        if not path.exists():
            return cls()

        with open(path) as f:
            config_dict = yaml.safe_load(f) or {}

        return cls(**config_dict)

    def to_yaml(self, path: str | Path) -> None:
        """Save settings to YAML file.

        Args:
            path: Path to save configuration
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = self.model_dump(mode="json")

        with open(path, "w") as f:
            yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings instance
    """
    # Try to load from config file first
    config_path = Path("config/screener.yaml")
    if config_path.exists():
        return Settings.from_yaml(config_path)

    return Settings()
