"""Configuration management for bankledger."""

import os
from dataclasses import dataclass
from typing import Optional

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("standard", "json")


@dataclass
class Settings:
    """Runtime settings, read from BANKLEDGER_* environment variables.

    ``database_url`` wins over ``database_path`` when both are set.
    """

    database_url: Optional[str] = None
    database_path: Optional[str] = None
    actor_id: str = "system"
    log_level: str = "WARNING"
    log_format: str = "standard"

    def __post_init__(self) -> None:
        self.log_level = self.log_level.upper()
        if self.log_level not in LOG_LEVELS:
            raise ValueError(
                f"Invalid log level '{self.log_level}'. Must be one of {', '.join(LOG_LEVELS)}"
            )
        self.log_format = self.log_format.lower()
        if self.log_format not in LOG_FORMATS:
            raise ValueError(
                f"Invalid log format '{self.log_format}'. Must be one of {', '.join(LOG_FORMATS)}"
            )
        if not self.actor_id or not self.actor_id.strip():
            raise ValueError("Actor ID cannot be empty")

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from environment variables."""
        return cls(
            database_url=os.getenv("BANKLEDGER_DB_URL") or None,
            database_path=os.getenv("BANKLEDGER_DB_PATH") or None,
            actor_id=os.getenv("BANKLEDGER_ACTOR", "system"),
            log_level=os.getenv("BANKLEDGER_LOG_LEVEL", "WARNING"),
            log_format=os.getenv("BANKLEDGER_LOG_FORMAT", "standard"),
        )
