"""
Presence updater.

Purpose
-------
Reflect a `ServerStatus` into the bot's Discord presence and, optionally,
its profile image.

Responsibilities
----------------
- Format the status into the activity text (`"12/64 players - Amiens"`)
- Push the activity on every call, identical or not
- Re-render and upload the banner only when the map/mode pair changed

Error Handling
--------------
Discord rejections (rate limits, invalid token, closed gateway) and banner
download/render failures raise `UpdateError`. The tick loop logs it and
carries on; a failed banner upload is retried on the next tick because the
last uploaded banner is only recorded after success.
"""

from __future__ import annotations

from typing import Optional, Tuple

import discord

from src.core.config.config import Settings
from src.core.exceptions import UpdateError
from src.core.logging.logger import get_logger
from src.modules.presence.banner import BannerRenderer
from src.modules.status.models import ServerStatus

logger = get_logger(__name__)

OFFLINE_TEXT = "offline"


def format_status(status: ServerStatus) -> str:
    """
    Display string for a status.

    >>> format_status(ServerStatus("s", 12, 64, True))
    '12/64 players'
    >>> format_status(ServerStatus.offline("s"))
    'offline'
    """
    if not status.is_online:
        return OFFLINE_TEXT
    text = f"{status.player_count}/{status.max_players} players"
    if status.map_name:
        text = f"{text} - {status.map_name}"
    return text


class PresenceUpdater:
    """
    Apply server status to a Discord client.

    Args:
        client: Connected discord.py client
        settings: Process settings (`set_banner_image`)
        banner_renderer: Renderer for profile images; banners are skipped
            when None
    """

    def __init__(
        self,
        client: discord.Client,
        settings: Settings,
        banner_renderer: Optional[BannerRenderer] = None,
    ) -> None:
        self._client = client
        self._settings = settings
        self._banner_renderer = banner_renderer
        self._last_text: Optional[str] = None
        self._last_banner_key: Optional[Tuple[str, str]] = None

    @property
    def last_text(self) -> Optional[str]:
        return self._last_text

    async def update(self, status: ServerStatus) -> None:
        text = format_status(status)

        try:
            await self._client.change_presence(
                status=discord.Status.online if status.is_online else discord.Status.idle,
                activity=discord.Game(name=text),
            )
        except discord.DiscordException as exc:
            raise UpdateError(
                f"Presence update rejected: {exc}",
                operation="presence",
                details={"text": text, "error_type": type(exc).__name__},
            ) from exc

        if text != self._last_text:
            logger.info("Presence changed", extra={"presence": text})
        self._last_text = text

        if self._settings.set_banner_image:
            await self._update_banner(status)

    async def _update_banner(self, status: ServerStatus) -> None:
        key = status.banner_key
        if key is None or key == self._last_banner_key or self._banner_renderer is None:
            return

        user = self._client.user
        if user is None:
            return

        image = await self._banner_renderer.render(status)
        if image is None:
            return

        try:
            await user.edit(avatar=image)
        except discord.DiscordException as exc:
            raise UpdateError(
                f"Profile image update rejected: {exc}",
                operation="banner",
                details={"map_code": key[0], "error_type": type(exc).__name__},
            ) from exc

        self._last_banner_key = key
        logger.info("Banner updated", extra={"map_code": key[0], "mode": key[1]})
