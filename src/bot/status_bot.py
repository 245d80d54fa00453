"""
Marne Status Bot - Discord client.

Purpose
-------
Own the Discord connection and the resources the tick loop needs.

Responsibilities
----------------
- Create the shared aiohttp session, fetcher, updater and health server
  in `setup_hook` (before the gateway connects)
- Start the tick loop once the gateway reports ready
- Shut everything down in order on `close()`

Non-Responsibilities
--------------------
- Fetching and formatting (delegated to the status and presence modules)
- Settings loading (done once in `main`)

Architecture Notes
------------------
- Non-privileged intents only; the bot reads nothing from guilds.
- `on_ready` can fire again after a reconnect; the loop is started only
  when no loop task is alive.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import aiohttp
import discord

from src.bot.lifecycle import TickLoop
from src.core.config.config import Settings
from src.core.infra.health import HealthServer, TickTracker
from src.core.logging.logger import get_logger
from src.modules.presence.banner import BannerRenderer
from src.modules.presence.updater import PresenceUpdater
from src.modules.status.fetcher import StatusFetcher

logger = get_logger(__name__)


class StatusBot(discord.Client):
    """
    Discord client that mirrors one game server into its presence.

    Args:
        settings: Immutable process settings
    """

    def __init__(self, settings: Settings) -> None:
        super().__init__(intents=discord.Intents.default())

        self.settings = settings
        self.tracker = TickTracker()
        self.health_server = HealthServer(
            self.tracker, host=settings.health_host, port=settings.health_port
        )

        self.http_session: Optional[aiohttp.ClientSession] = None
        self.tick_loop: Optional[TickLoop] = None
        self._stop_event = asyncio.Event()
        self._loop_task: Optional[asyncio.Task[None]] = None

    # --------------------------------------------------------------- #
    # Startup
    # --------------------------------------------------------------- #

    async def setup_hook(self) -> None:
        """Create HTTP resources and start the health endpoint."""
        self.http_session = aiohttp.ClientSession()

        banner_renderer = (
            BannerRenderer(self.http_session) if self.settings.set_banner_image else None
        )
        self.tick_loop = TickLoop(
            self.settings,
            StatusFetcher(self.http_session),
            PresenceUpdater(self, self.settings, banner_renderer),
            self.tracker,
        )

        await self.health_server.start()
        logger.info("✓ Bot setup complete", extra=self.settings.summary())

    async def on_ready(self) -> None:
        logger.info("Logged in as %s", self.user)

        if self.settings.server_name:
            logger.info("Started monitoring server with name: %s", self.settings.server_name)
        else:
            logger.info("Started monitoring server with id: %s", self.settings.server_id)

        self.start_tick_loop()

    def start_tick_loop(self) -> None:
        if self.tick_loop is None:
            raise RuntimeError("setup_hook has not run")
        if self._loop_task is not None and not self._loop_task.done():
            return
        self._loop_task = asyncio.create_task(
            self.tick_loop.run(self._stop_event), name="tick-loop"
        )

    # --------------------------------------------------------------- #
    # Shutdown
    # --------------------------------------------------------------- #

    async def close(self) -> None:
        """Stop the loop, the health endpoint and the HTTP session, then disconnect."""
        logger.info("Shutting down")
        self._stop_event.set()

        if self._loop_task is not None:
            try:
                await asyncio.wait_for(self._loop_task, timeout=10.0)
            except asyncio.TimeoutError:
                # wait_for has already cancelled the task
                logger.warning("Tick loop did not stop in time; cancelled")
            except Exception as exc:
                logger.error(
                    "Tick loop ended with an error",
                    extra={"error": str(exc), "error_type": type(exc).__name__},
                    exc_info=True,
                )
            self._loop_task = None

        await self.health_server.stop()

        if self.http_session is not None and not self.http_session.closed:
            await self.http_session.close()

        await super().close()
        logger.info("✓ Bot shutdown complete")
