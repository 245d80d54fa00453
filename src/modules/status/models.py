"""
Server status record.

`ServerStatus` is created fresh on every tick from the Marne server list,
consumed by the presence formatter, and discarded. It is never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True, slots=True)
class ServerStatus:
    """
    Snapshot of one game server at poll time.

    Attributes
    ----------
    name:
        Server name as listed by Marne (or the configured identifier when
        the server is not listed).
    player_count / max_players:
        Current and maximum players, both >= 0.
    is_online:
        False when the server is absent from the list.
    map_name:
        Display name of the current map (`Amiens`), if known.
    map_code:
        Internal map code (`MP_Amiens`), used to look up the banner image.
    game_mode:
        Short mode code (`CQ`), empty when the mode is unknown.
    """

    name: str
    player_count: int
    max_players: int
    is_online: bool
    server_id: Optional[int] = None
    map_name: Optional[str] = None
    map_code: Optional[str] = None
    game_mode: Optional[str] = None

    def __post_init__(self) -> None:
        if self.player_count < 0:
            raise ValueError(f"player_count must be >= 0, got {self.player_count}")
        if self.max_players < 0:
            raise ValueError(f"max_players must be >= 0, got {self.max_players}")

    @classmethod
    def offline(cls, name: str, server_id: Optional[int] = None) -> "ServerStatus":
        return cls(name=name, player_count=0, max_players=0, is_online=False, server_id=server_id)

    @property
    def banner_key(self) -> Optional[tuple[str, str]]:
        """Identity of the banner this status would render, or None without a map."""
        if not self.is_online or not self.map_code:
            return None
        return (self.map_code, self.game_mode or "")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "server_id": self.server_id,
            "player_count": self.player_count,
            "max_players": self.max_players,
            "is_online": self.is_online,
            "map_name": self.map_name,
            "game_mode": self.game_mode,
        }
