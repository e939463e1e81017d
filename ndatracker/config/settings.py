"""
Application settings and configuration.
"""

import logging
import sys
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(env_prefix="NDATRACK_", env_file=".env")

    # Storage
    data_home: Path = Field(
        default_factory=lambda: Path.home() / ".ndatracker",
        description="Base directory for NDA Tracker data",
    )
    storage_backend: Literal["memory", "json", "redis"] = Field(
        default="json", description="Key-value medium holding the contract collection"
    )
    storage_path: Optional[Path] = Field(
        default=None, description="JSON file used by the 'json' backend"
    )
    storage_key: str = Field(
        default="ndaContracts", description="Key the collection is persisted under"
    )
    redis_url: str = Field(default="redis://localhost:6379", description="Redis URL")

    # Alerts
    alert_horizon_days: int = Field(
        default=30, ge=0, description="Days ahead a contract counts as expiring soon"
    )

    # Extraction
    extraction_latency_seconds: float = Field(
        default=2.0, ge=0, description="Simulated latency of the placeholder backend"
    )
    counterparty_suffix: str = Field(
        default="Inc.", description="Organizational label appended to counterparties"
    )

    log_level: str = Field(default="INFO", description="Log level for ndatracker.*")

    def __init__(self, **kwargs):
        super().__init__(**kwargs)

        if self.storage_path is None:
            self.storage_path = self.data_home / "data" / "contracts.json"

        if self.storage_backend == "json":
            self.storage_path.parent.mkdir(parents=True, exist_ok=True)


def configure_logging(level: str = "INFO") -> None:
    """
    Configure logging with development-friendly structured output.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    from ..utils.logging.structured import create_development_formatter

    log_level = getattr(logging, level.upper())

    # Configure only our application logger (ndatracker.*)
    app_logger = logging.getLogger("ndatracker")
    app_logger.setLevel(log_level)

    for handler in app_logger.handlers[:]:
        app_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(create_development_formatter())
    app_logger.addHandler(console_handler)

    app_logger.propagate = False


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
