"""
Marne server list fetcher.

Purpose
-------
Issue one GET per tick against the public Marne server list of the configured
title and turn the entry for the monitored server into a `ServerStatus`.

Responsibilities
----------------
- Pick the list URL for the title (`bf1` / `bfv`)
- Strip the UTF-8 byte-order mark Marne prefixes to its JSON body
- Find the server by exact name (str identifier) or numeric ID (int identifier)
- Resolve map and mode codes to display values

Non-Responsibilities
--------------------
- Retrying (the next tick retries)
- Formatting (handled by the presence updater)

Error Handling
--------------
Transport errors, non-2xx responses, undecodable bodies and unexpected JSON
shapes raise `FetchError`. A well-formed list that does not contain the
server yields an offline status instead of an error.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, Mapping, Optional, Union

import aiohttp

from src.core.config.config import Game
from src.core.exceptions import FetchError
from src.core.logging.logger import get_logger
from src.modules.status.maps import map_code, map_display_name, small_mode
from src.modules.status.models import ServerStatus

logger = get_logger(__name__)

ServerIdentifier = Union[str, int]

SERVER_LIST_URLS: Dict[Game, str] = {
    Game.BF1: "https://marne.io/api/srvlst/",
    Game.BFV: "https://marne.io/api/v/srvlst/",
}


def _matches(server: Mapping[str, Any], identifier: ServerIdentifier) -> bool:
    if isinstance(identifier, str):
        return server.get("name") == identifier
    return server.get("id") == identifier


def _to_status(server: Mapping[str, Any]) -> ServerStatus:
    code = map_code(str(server.get("mapName") or ""))
    return ServerStatus(
        name=str(server["name"]),
        server_id=server.get("id"),
        player_count=int(server["currentPlayers"]),
        max_players=int(server["maxPlayers"]),
        is_online=True,
        map_name=map_display_name(code) if code else None,
        map_code=code or None,
        game_mode=small_mode(str(server.get("gameMode") or "")),
    )


def parse_server_list(payload: Any, identifier: ServerIdentifier) -> ServerStatus:
    """
    Extract the status of one server from a decoded Marne server list.

    Parameters
    ----------
    payload:
        Decoded JSON, expected as `{"servers": [{...}, ...]}`.
    identifier:
        Server name (exact match) or server ID.

    Raises
    ------
    FetchError:
        If the payload does not have the server list shape, or the matching
        entry has missing or invalid player counts.
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("servers"), list):
        raise FetchError(
            "Server list payload has no 'servers' list",
            details={"payload_type": type(payload).__name__},
        )

    for server in payload["servers"]:
        if not isinstance(server, dict) or not _matches(server, identifier):
            continue
        try:
            return _to_status(server)
        except (KeyError, TypeError, ValueError) as exc:
            raise FetchError(
                f"Server entry is malformed: {exc}",
                details={"server": identifier},
            ) from exc

    logger.info(
        "Server not found in server list",
        extra={"server_identifier": identifier, "listed": len(payload["servers"])},
    )
    if isinstance(identifier, int):
        return ServerStatus.offline(name=str(identifier), server_id=identifier)
    return ServerStatus.offline(name=identifier)


class StatusFetcher:
    """
    Fetch the status of one server from Marne.

    The aiohttp session is owned by the caller and shared across ticks.

    Example
    -------
    >>> async with aiohttp.ClientSession() as session:
    ...     status = await StatusFetcher(session).fetch("My Server", Game.BF1)
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        urls: Optional[Mapping[Game, str]] = None,
    ) -> None:
        self._session = session
        self._urls: Dict[Game, str] = dict(urls or SERVER_LIST_URLS)

    def url_for(self, game: Game) -> str:
        return self._urls[game]

    async def fetch(self, identifier: ServerIdentifier, game: Game) -> ServerStatus:
        url = self.url_for(game)

        try:
            async with self._session.get(url) as response:
                if not 200 <= response.status < 300:
                    raise FetchError(
                        f"Server list returned HTTP {response.status}",
                        url=url,
                        status=response.status,
                    )
                body = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise FetchError(
                f"Server list request failed: {exc!r}",
                url=url,
                details={"error_type": type(exc).__name__},
            ) from exc

        try:
            # utf-8-sig drops the leading byte-order mark
            payload = json.loads(body.decode("utf-8-sig"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise FetchError(
                f"Server list is not valid JSON: {exc}", url=url, status=response.status
            ) from exc

        status = parse_server_list(payload, identifier)
        logger.debug("Fetched server status", extra={"status": status.to_dict()})
        return status


__all__ = [
    "SERVER_LIST_URLS",
    "ServerIdentifier",
    "StatusFetcher",
    "parse_server_list",
]
