"""
Banner image renderer.

Downloads the landscape image of the current map, darkens it, and draws the
short game mode code (`CQ`, `OP`, ...) across it. The result is used as the
bot's profile image so the member list shows what the server is playing.

Image work runs in a worker thread; Pillow decoding and drawing would
otherwise block the event loop for the duration of a large JPEG decode.
"""

from __future__ import annotations

import asyncio
import io

import aiohttp
from PIL import Image, ImageDraw, ImageFont

from src.core.exceptions import UpdateError
from src.core.logging.logger import get_logger
from src.modules.status.maps import map_image_url
from src.modules.status.models import ServerStatus

logger = get_logger(__name__)

DARKEN_BY = 25
TEXT_COLOR = (255, 255, 255)


def render_banner(image_bytes: bytes, mode_text: str) -> bytes:
    """
    Darken a map image and draw the mode code on it.

    Returns the rendered image as JPEG bytes.

    Raises
    ------
    OSError:
        If the bytes are not an image Pillow can decode.
    Image.DecompressionBombError:
        If the image exceeds Pillow's pixel limit.
    """
    with Image.open(io.BytesIO(image_bytes)) as source:
        image = source.convert("RGB")

    image = Image.eval(image, lambda value: max(value - DARKEN_BY, 0))

    if mode_text:
        width, height = image.size
        font = ImageFont.load_default(size=max(int(height / 1.7), 1))
        draw = ImageDraw.Draw(image)
        draw.text((width / 3.5, height / 4.8), mode_text, fill=TEXT_COLOR, font=font)

    output = io.BytesIO()
    image.save(output, format="JPEG")
    return output.getvalue()


class BannerRenderer:
    """Fetch map images and render banners for a `ServerStatus`."""

    def __init__(self, session: aiohttp.ClientSession) -> None:
        self._session = session

    async def render(self, status: ServerStatus) -> bytes | None:
        """
        Render the banner for `status`, or return None when the map has no image.

        Raises
        ------
        UpdateError:
            If the image cannot be downloaded or decoded.
        """
        url = map_image_url(status.map_code) if status.map_code else None
        if url is None:
            logger.debug("No banner image for map", extra={"map_code": status.map_code})
            return None

        try:
            async with self._session.get(url) as response:
                response.raise_for_status()
                image_bytes = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise UpdateError(
                f"Map image download failed: {exc!r}",
                operation="banner",
                details={"url": url},
            ) from exc

        try:
            return await asyncio.to_thread(render_banner, image_bytes, status.game_mode or "")
        except (OSError, ValueError, Image.DecompressionBombError) as exc:
            raise UpdateError(
                f"Map image could not be rendered: {exc}",
                operation="banner",
                details={"url": url},
            ) from exc
