"""HabitLens MCP Server: application factory.

This module provides:
- create_app() for testability (integration tests create fresh server instances)
- Module-level `mcp` variable for `fastmcp run src/habitlens/core/server/app.py:mcp`
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date

from fastmcp import FastMCP

from habitlens.core.config.settings import get_settings
from habitlens.domains.habits.connectors import InstanceStore
from habitlens.domains.habits.connectors.mock_data import get_sample_store
from habitlens.domains.habits.connectors.rest_api import RestInstanceStore
from habitlens.domains.habits.tools.habit_progress_tools import (
    register_habit_progress_tools,
)

logger = logging.getLogger(__name__)

SERVER_NAME = "HabitLens"
SERVER_VERSION = "0.1.0"


def create_app(
    *,
    instance_store_override: InstanceStore | None = None,
    today_provider: Callable[[], date] | None = None,
) -> FastMCP:
    """Create and configure the HabitLens MCP server.

    This is the main application factory. It:
    1. Creates the FastMCP server instance
    2. Picks the Instance Store (REST API when configured, sample data otherwise)
    3. Registers the health check and the habit progress tools
    """
    settings = get_settings()
    today_provider = today_provider or date.today

    # --- Server instance ---
    server = FastMCP(
        SERVER_NAME,
        instructions=(
            "HabitLens habit progress server. Derives daily habit summaries, "
            "the all-habit completion streak, per-habit tracking summaries and "
            "year heat-maps from the habit dashboard's completion records."
        ),
    )

    # --- Initialize Instance Store ---
    if instance_store_override is not None:
        store = instance_store_override
    elif settings.habit_api_url:
        store = RestInstanceStore(
            settings.habit_api_url,
            username=settings.habit_api_username,
            password=settings.habit_api_password,
            timeout=settings.habit_api_timeout_seconds,
        )
        logger.info("Habit API store configured for %s", settings.habit_api_url)
    else:
        store = get_sample_store(today_provider())
        logger.info("No HABIT_API_URL configured; using sample habit data")

    # --- Register tools ---
    @server.tool
    def health_check() -> dict:
        """Check server health and return basic status information."""
        return {
            "status": "ok",
            "server": SERVER_NAME,
            "version": SERVER_VERSION,
            "data_source": store.data_source,
            "store_connected": store.is_connected(),
            "tracking_start_date": settings.tracking_start_date.isoformat(),
            "streak_max_lookback": settings.streak_max_lookback,
        }

    register_habit_progress_tools(
        server,
        store,
        today_provider=today_provider,
        default_start=settings.tracking_start_date,
        max_lookback=settings.streak_max_lookback,
        require_all_tracked=settings.streak_require_all_tracked,
    )
    logger.info("Habit progress tools registered (data source: %s)", store.data_source)

    return server


# Module-level instance for FastMCP discovery (`fastmcp run ...app.py:mcp`).
# Lazy: only created when this module is loaded directly (not when tests import create_app).
def __getattr__(name: str):
    if name == "mcp":
        global mcp  # noqa: PLW0603
        mcp = create_app()
        return mcp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
