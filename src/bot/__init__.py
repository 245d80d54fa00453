"""
Bot layer: Discord client and tick loop.

Example
-------
    from src.bot import StatusBot

    bot = StatusBot(settings)
    await bot.start(settings.token)
"""

from __future__ import annotations

from src.bot.lifecycle import TickLoop
from src.bot.status_bot import StatusBot

__all__ = [
    "StatusBot",
    "TickLoop",
]
