"""HabitLens server entry point: ``python -m habitlens.core.server.main``.

Startup checks the settings before any tool is registered, so a bad
environment fails fast instead of surfacing as errors inside tool calls.
"""

from __future__ import annotations

import logging
from ipaddress import ip_address
from urllib.parse import urlsplit

from habitlens.core.config.settings import Settings, get_settings
from habitlens.core.server.app import create_app

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _is_loopback_host(host: str) -> bool:
    if host == "localhost":
        return True
    try:
        return ip_address(host).is_loopback
    except ValueError:
        return False


def _configure_logging(level_name: str) -> None:
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)


def check_settings(settings: Settings) -> None:
    """Raise RuntimeError if ``settings`` cannot serve habit history safely."""
    if not settings.habitlens_allow_insecure_bind and not _is_loopback_host(
        settings.habitlens_host
    ):
        raise RuntimeError(
            f"HabitLens would expose habit history on non-loopback host "
            f"{settings.habitlens_host!r} with no authentication. "
            "Bind to 127.0.0.1 or set HABITLENS_ALLOW_INSECURE_BIND=true."
        )
    if settings.streak_max_lookback < 0:
        raise RuntimeError(
            f"STREAK_MAX_LOOKBACK must be >= 0, got {settings.streak_max_lookback}"
        )
    if settings.habit_api_url:
        scheme = urlsplit(settings.habit_api_url).scheme
        if scheme not in ("http", "https"):
            raise RuntimeError(
                f"HABIT_API_URL must be an http(s) URL, got {settings.habit_api_url!r}"
            )
    if settings.habit_api_timeout_seconds <= 0:
        raise RuntimeError("HABIT_API_TIMEOUT_SECONDS must be positive")


def describe_engine(settings: Settings) -> str:
    """One-line summary of where habit data comes from and how streaks are counted."""
    source = settings.habit_api_url or "sample data"
    mode = "conservative" if settings.streak_require_all_tracked else "lenient"
    return (
        f"source={source} tracking_start={settings.tracking_start_date.isoformat()} "
        f"lookback={settings.streak_max_lookback} streak_mode={mode}"
    )


def run() -> None:
    """Start the HabitLens MCP server with Streamable HTTP transport."""
    settings = get_settings()
    _configure_logging(settings.habitlens_log_level)
    check_settings(settings)

    logger.info(
        "Starting HabitLens on %s:%d (%s)",
        settings.habitlens_host,
        settings.habitlens_port,
        describe_engine(settings),
    )
    mcp = create_app()
    mcp.run(
        transport="streamable-http",
        host=settings.habitlens_host,
        port=settings.habitlens_port,
    )


if __name__ == "__main__":
    run()
