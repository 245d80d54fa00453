"""
Tick loop for the Marne status bot.

Purpose
-------
Drive fetch -> update at a fixed interval until asked to stop.

Responsibilities
----------------
- Run one tick: fetch the server status, apply it to the presence
- Log and swallow transient errors (`FetchError`, `UpdateError`)
- Keep ticking after unexpected errors, logged with traceback
- Record every tick in the `TickTracker` read by the health endpoint
- Wait `poll_interval` seconds between ticks, waking early on stop

Non-Responsibilities
--------------------
- Discord connection management (handled by StatusBot)
- Retrying a failed tick early: the next tick is the only retry

Architecture Notes
------------------
- The loop is stopped through an `asyncio.Event` so shutdown can finish the
  current tick and return instead of being cancelled mid-request.
- Each tick runs inside a `LogContext` so its log lines share a correlation ID.
"""

from __future__ import annotations

import asyncio
import time
from typing import Optional

from src.core.config.config import Settings
from src.core.exceptions import FetchError, MarneBotError, UpdateError
from src.core.infra.health import TickTracker
from src.core.logging.logger import LogContext, get_logger
from src.modules.presence.updater import PresenceUpdater
from src.modules.status.fetcher import StatusFetcher

logger = get_logger(__name__)


class TickLoop:
    """
    Periodic fetch + update loop.

    Args:
        settings: Process settings (server, game, interval)
        fetcher: Source of `ServerStatus`
        updater: Sink for `ServerStatus`
        tracker: Tick outcome record shared with the health endpoint
    """

    def __init__(
        self,
        settings: Settings,
        fetcher: StatusFetcher,
        updater: PresenceUpdater,
        tracker: Optional[TickTracker] = None,
    ) -> None:
        self._settings = settings
        self._fetcher = fetcher
        self._updater = updater
        self.tracker = tracker or TickTracker()
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    async def run_once(self) -> bool:
        """
        Execute one tick.

        Returns
        -------
        bool
            True if the status was fetched and applied, False if the tick
            ended with a logged `FetchError` or `UpdateError`.
        """
        identifier = self._settings.server_identifier

        async with LogContext(component="tick", operation="tick", server=str(identifier)):
            start = time.perf_counter()
            try:
                status = await self._fetcher.fetch(identifier, self._settings.game)
                await self._updater.update(status)
            except (FetchError, UpdateError) as exc:
                self._log_tick_error(exc)
                self.tracker.record(ok=False, error=exc.message)
                return False

            self.tracker.record(ok=True)
            logger.debug(
                "Tick complete",
                extra={
                    "duration_ms": round((time.perf_counter() - start) * 1000, 2),
                    "online": status.is_online,
                    "players": status.player_count,
                },
            )
            return True

    async def run(self, stop_event: asyncio.Event) -> None:
        """
        Tick until `stop_event` is set.

        The first tick runs immediately; afterwards the loop waits
        `poll_interval` seconds or until the event is set.
        """
        self._running = True
        logger.info(
            "Tick loop started",
            extra={
                "server_identifier": self._settings.server_identifier,
                "game": self._settings.game.value,
                "interval_seconds": self._settings.poll_interval,
            },
        )
        try:
            while not stop_event.is_set():
                try:
                    await self.run_once()
                except Exception as exc:
                    self.tracker.record(ok=False, error=f"{type(exc).__name__}: {exc}")
                    logger.error(
                        "Unexpected error in tick loop",
                        extra={"error": str(exc), "error_type": type(exc).__name__},
                        exc_info=True,
                    )
                try:
                    await asyncio.wait_for(stop_event.wait(), timeout=self._settings.poll_interval)
                except asyncio.TimeoutError:
                    continue
        finally:
            self._running = False
            logger.info(
                "Tick loop stopped",
                extra={"ticks": self.tracker.ticks, "failed_ticks": self.tracker.failed_ticks},
            )

    @staticmethod
    def _log_tick_error(exc: MarneBotError) -> None:
        if isinstance(exc, FetchError):
            logger.warning("Can't get new server status: %s", exc.message, extra=exc.to_dict())
        else:
            logger.warning("Can't update presence: %s", exc.message, extra=exc.to_dict())
