"""
Emote Tracker - Health Check Server
===================================

HTTP health check endpoint for external monitoring.

DESIGN:
    Provides a lightweight HTTP server that external monitoring tools
    can ping to verify the bot is running and see how far history
    backfill has come.

    The /health endpoint returns JSON with connection state and backfill
    progress without exposing sensitive information.

Author: حَـــــنَّـــــا
"""

from aiohttp import web
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from src.core.logger import logger
from src.core.config import NY_TZ
from src.core.constants import HEALTH_CHECK_PORT, LOG_TRUNCATE_LENGTH

if TYPE_CHECKING:
    from src.bot import EmoteBot


# =============================================================================
# Health Check Server
# =============================================================================

class HealthCheckServer:
    """
    Simple HTTP health check server for monitoring.

    DESIGN:
        Uses aiohttp for async HTTP serving within the bot's event loop.
        Binds to 0.0.0.0 to accept external connections.

    Attributes:
        bot: Reference to the main bot instance.
        port: Port number for the HTTP server.
        app: aiohttp Application instance.
        runner: aiohttp AppRunner for lifecycle management.
    """

    def __init__(self, bot: "EmoteBot", port: int = HEALTH_CHECK_PORT) -> None:
        self.bot = bot
        self.port = port
        self.app = web.Application()
        self.runner: Optional[web.AppRunner] = None

        self.app.router.add_get("/health", self.health_handler)
        self.app.router.add_get("/", self.health_handler)

    # =========================================================================
    # Request Handlers
    # =========================================================================

    def build_status(self) -> dict:
        """
        Collect the status payload.

        "healthy" means connected to Discord, "starting" means the gateway
        is not ready yet.
        """
        is_connected = self.bot.is_ready() if hasattr(self.bot, "is_ready") else False
        guild_count = len(self.bot.guilds) if hasattr(self.bot, "guilds") else 0

        scheduler = getattr(self.bot, "scheduler", None)
        backfill = scheduler.status() if scheduler is not None else {"enabled": False}

        return {
            "status": "healthy" if is_connected else "starting",
            "bot": "EmoteTracker",
            "connected": is_connected,
            "guilds": guild_count,
            "backfill": backfill,
            "timestamp": datetime.now(NY_TZ).isoformat(),
        }

    async def health_handler(self, request: web.Request) -> web.Response:
        """Handle health check requests."""
        try:
            status = self.build_status()
            logger.debug(f"Health check: {status['status']}")
            return web.json_response(status)

        except Exception as e:
            logger.error("Health Check Error", [
                ("Error", str(e)[:LOG_TRUNCATE_LENGTH]),
            ])
            return web.json_response(
                {"status": "error", "error": str(e)},
                status=500,
            )

    # =========================================================================
    # Lifecycle Management
    # =========================================================================

    async def start(self) -> None:
        """Start the health check server without blocking."""
        try:
            self.runner = web.AppRunner(self.app)
            await self.runner.setup()
            site = web.TCPSite(self.runner, "0.0.0.0", self.port)
            await site.start()

            logger.tree("Health Server Started", [
                ("Port", str(self.port)),
                ("Endpoint", f"http://0.0.0.0:{self.port}/health"),
            ], emoji="🏥")

        except Exception as e:
            logger.error("Health Server Startup Failed", [
                ("Port", str(self.port)),
                ("Error", str(e)[:LOG_TRUNCATE_LENGTH]),
            ])

    async def stop(self) -> None:
        """Stop the server. Safe to call even if it never started."""
        if self.runner:
            await self.runner.cleanup()
            self.runner = None
            logger.info("Health check server stopped")


# =============================================================================
# Module Export
# =============================================================================

__all__ = ["HealthCheckServer"]
