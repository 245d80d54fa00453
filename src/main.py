"""
Marne Status Bot - Application Entry Point
==========================================

- Settings loading and validation (fatal on error)
- Logging setup
- Bot lifecycle management
- Graceful shutdown on SIGTERM / SIGINT
"""

import asyncio
import signal
import sys
from typing import Optional, Set

import aiohttp
import discord

from src.bot.status_bot import StatusBot
from src.core.config import ConfigError, Settings, load_settings
from src.core.logging.logger import get_logger, setup_logging, shutdown_logging

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1

# Strong references to shutdown tasks scheduled from signal handlers
_shutdown_tasks: Set[asyncio.Task] = set()


# ============================================================================
# Process Signals
# ============================================================================

def _install_signal_handlers(loop: asyncio.AbstractEventLoop, bot: StatusBot) -> None:
    """Close the bot on SIGTERM/SIGINT so the current tick can finish."""

    def _request_shutdown(signame: str) -> None:
        logger.info("Received %s; shutting down gracefully", signame)
        if not bot.is_closed():
            task = loop.create_task(bot.close())
            _shutdown_tasks.add(task)
            task.add_done_callback(_shutdown_tasks.discard)

    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, _request_shutdown, sig.name)
        except NotImplementedError:
            logger.debug("%s handler not supported on this platform", sig.name)


# ============================================================================
# Application Entrypoint
# ============================================================================

async def run(settings: Settings) -> int:
    """Run the bot until it is closed; return the process exit code."""
    bot = StatusBot(settings)
    _install_signal_handlers(asyncio.get_running_loop(), bot)

    try:
        async with bot:
            await bot.start(settings.token)
    except discord.LoginFailure as exc:
        logger.critical("Discord rejected the token: %s", exc)
        return EXIT_FATAL
    except aiohttp.ClientError as exc:
        logger.critical("Could not connect to Discord: %s", exc, exc_info=True)
        return EXIT_FATAL
    except OSError as exc:
        logger.critical("Health endpoint could not start: %s", exc, exc_info=True)
        return EXIT_FATAL

    return EXIT_OK


def main(argv: Optional[list] = None) -> int:
    """
    Marne Status Bot entry point.

    Lifecycle:
        1. Load and validate settings (exit 1 on ConfigError)
        2. Configure logging
        3. Run the bot until signaled
    """
    argv = sys.argv[1:] if argv is None else argv
    config_path = argv[0] if argv else None

    try:
        settings = load_settings(config_path)
    except ConfigError as exc:
        # Structured logging needs settings; fall back to stderr
        print(f"FATAL: configuration error: {exc}", file=sys.stderr)
        return EXIT_FATAL

    setup_logging(settings)
    logger.info("========== MARNE STATUS BOT START ==========", extra=settings.summary())

    try:
        return asyncio.run(run(settings))
    except KeyboardInterrupt:
        logger.info("Bot manually stopped via keyboard interrupt.")
        return EXIT_OK
    finally:
        logger.info("========== SHUTDOWN COMPLETE ==========")
        shutdown_logging()


if __name__ == "__main__":
    sys.exit(main())
