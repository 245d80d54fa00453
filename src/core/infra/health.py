"""
Health endpoint for container orchestration.

Purpose
-------
Serve a liveness probe on a local port (3030 by default) so the container
`HEALTHCHECK` and orchestrators can tell the process is alive.

Responsibilities
----------------
- `GET /` (and any other path): always `200`, short text with the age of
  the last tick
- `GET /health`: always `200`, JSON report of the tick tracker
- Track the last completed tick (`TickTracker`), written by the tick loop

Non-Responsibilities
--------------------
- Judging fetch/update outcomes: a failing status API or a Discord rate
  limit does not make the process unhealthy, so the status code never
  depends on them. The report exposes them for humans and dashboards.

Health Status
-------------
- **HEALTHY**: last tick succeeded
- **DEGRADED**: no tick yet, or the last tick failed

Report Structure
----------------
{
    "status": "HEALTHY" | "DEGRADED",
    "timestamp": float,
    "ticks": int,
    "failed_ticks": int,
    "last_tick_at": float | None,      # Unix timestamp
    "last_tick_age_seconds": float | None,
    "last_tick_ok": bool | None,
    "last_error": str | None
}

Concurrency
-----------
The tracker is written by the tick loop task and read by request handlers on
the same event loop, so no locking is needed.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from aiohttp import web

from src.core.logging.logger import get_logger

logger = get_logger(__name__)

TRACKER_KEY: web.AppKey["TickTracker"] = web.AppKey("tick_tracker")


class HealthStatus(Enum):
    HEALTHY = "HEALTHY"
    DEGRADED = "DEGRADED"


# ═════════════════════════════════════════════════════════════════════════════
# TICK TRACKER
# ═════════════════════════════════════════════════════════════════════════════


@dataclass
class TickTracker:
    """Outcome of the most recent tick plus running counters."""

    ticks: int = 0
    failed_ticks: int = 0
    last_tick_at: Optional[float] = None
    last_tick_monotonic: Optional[float] = None
    last_tick_ok: Optional[bool] = None
    last_error: Optional[str] = None

    def record(self, ok: bool, error: Optional[str] = None) -> None:
        self.ticks += 1
        if not ok:
            self.failed_ticks += 1
        self.last_tick_at = time.time()
        self.last_tick_monotonic = time.monotonic()
        self.last_tick_ok = ok
        self.last_error = error

    def last_tick_age(self) -> Optional[float]:
        """Seconds since the last tick, or None before the first one."""
        if self.last_tick_monotonic is None:
            return None
        return time.monotonic() - self.last_tick_monotonic

    def status(self) -> HealthStatus:
        return HealthStatus.HEALTHY if self.last_tick_ok else HealthStatus.DEGRADED

    def report(self) -> Dict[str, Any]:
        age = self.last_tick_age()
        return {
            "status": self.status().value,
            "timestamp": time.time(),
            "ticks": self.ticks,
            "failed_ticks": self.failed_ticks,
            "last_tick_at": self.last_tick_at,
            "last_tick_age_seconds": round(age, 2) if age is not None else None,
            "last_tick_ok": self.last_tick_ok,
            "last_error": self.last_error,
        }


# ═════════════════════════════════════════════════════════════════════════════
# HTTP APP
# ═════════════════════════════════════════════════════════════════════════════


async def _liveness(request: web.Request) -> web.Response:
    tracker = request.app[TRACKER_KEY]
    age = tracker.last_tick_age()
    if age is None:
        return web.Response(text="ok: no tick yet", status=200)
    return web.Response(text=f"ok: last tick {int(age // 60)}m ago", status=200)


async def _report(request: web.Request) -> web.Response:
    return web.json_response(request.app[TRACKER_KEY].report(), status=200)


def create_health_app(tracker: TickTracker) -> web.Application:
    app = web.Application()
    app[TRACKER_KEY] = tracker
    app.router.add_get("/", _liveness)
    app.router.add_get("/health", _report)
    app.router.add_get("/{tail:.*}", _liveness)
    return app


class HealthServer:
    """
    Run the health app on its own `TCPSite` inside the bot's event loop.

    Example
    -------
    >>> server = HealthServer(tracker, "0.0.0.0", 3030)
    >>> await server.start()
    >>> ...
    >>> await server.stop()
    """

    def __init__(self, tracker: TickTracker, host: str = "0.0.0.0", port: int = 3030) -> None:
        self._tracker = tracker
        self._host = host
        self._port = port
        self._runner: Optional[web.AppRunner] = None

    @property
    def is_running(self) -> bool:
        return self._runner is not None

    async def start(self) -> None:
        if self._runner is not None:
            return

        runner = web.AppRunner(create_health_app(self._tracker), access_log=None)
        await runner.setup()
        site = web.TCPSite(runner, self._host, self._port)
        try:
            await site.start()
        except OSError:
            await runner.cleanup()
            raise
        self._runner = runner

        logger.info(
            "Health endpoint listening",
            extra={"host": self._host, "port": self._port},
        )

    async def stop(self) -> None:
        if self._runner is None:
            return
        await self._runner.cleanup()
        self._runner = None
        logger.info("Health endpoint stopped")
