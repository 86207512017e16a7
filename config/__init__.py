"""Configuration module for strategy-screener.

Provides centralized configuration management using:
- Environment variables for deployment overrides
- YAML files for local configuration
- Pydantic for validation
"""

from config.settings import (
    Settings,
    get_settings,
    ApiConfig,
    ScanConfig,
    LoggingConfig,
)

__all__ = [
    "Settings",
    "get_settings",
    "ApiConfig",
    "ScanConfig",
    "LoggingConfig",
]
