"""Application settings loaded from environment variables."""

from __future__ import annotations

from datetime import date

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """HabitLens server configuration."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Server
    # Loopback by default: the tool server has no auth layer of its own.
    habitlens_host: str = "127.0.0.1"
    habitlens_port: int = 8001
    habitlens_log_level: str = "info"
    habitlens_allow_insecure_bind: bool = False

    # Instance Store (dashboard REST API). Empty URL -> sample data.
    habit_api_url: str = ""
    habit_api_username: str = ""
    habit_api_password: str = ""
    habit_api_timeout_seconds: float = 10.0

    # Engine defaults
    tracking_start_date: date = date(2025, 6, 27)
    streak_max_lookback: int = 30
    streak_require_all_tracked: bool = True


def get_settings() -> Settings:
    """Create and return a Settings instance."""
    return Settings()
