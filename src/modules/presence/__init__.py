"""
Presence Module
===============

Turns a `ServerStatus` into the bot's Discord activity and profile image.
"""

from src.modules.presence.banner import BannerRenderer, render_banner
from src.modules.presence.updater import PresenceUpdater, format_status

__all__ = [
    "BannerRenderer",
    "PresenceUpdater",
    "format_status",
    "render_banner",
]
