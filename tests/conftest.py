"""
Pytest Configuration and Fixtures
=================================

Purpose
-------
Shared fixtures for the unit test suite: settings records, Marne server list
payloads, and discord.py client mocks.

Architecture Notes
------------------
- Async tests use pytest-asyncio (`@pytest.mark.asyncio`)
- Discord is never contacted; the client is a MagicMock with AsyncMock
  coroutines for the calls the presence updater makes
- HTTP behavior is tested against in-process aiohttp servers
"""

from __future__ import annotations

from typing import Any, Dict

import pytest

from src.core.config.config import Game, Settings
from src.modules.status.models import ServerStatus

SERVER_NAME = "[EU] Marne Test Server"
SERVER_ID = 4242


# ============================================================================
# SETTINGS FIXTURES
# ============================================================================


@pytest.fixture
def settings() -> Settings:
    """Settings monitoring a server by name, banner enabled, fast interval."""
    return Settings(
        token="test-token",
        game=Game.BF1,
        server_name=SERVER_NAME,
        poll_interval=0.01,
    )


@pytest.fixture
def settings_without_banner(settings: Settings) -> Settings:
    return Settings(
        token=settings.token,
        game=settings.game,
        server_name=settings.server_name,
        set_banner_image=False,
        poll_interval=settings.poll_interval,
    )


# ============================================================================
# STATUS FIXTURES
# ============================================================================


def make_server_entry(**overrides: Any) -> Dict[str, Any]:
    """One server entry shaped like the Marne server list."""
    entry: Dict[str, Any] = {
        "id": SERVER_ID,
        "name": SERVER_NAME,
        "mapName": "Levels/MP/MP_Amiens/MP_Amiens",
        "gameMode": "Conquest0",
        "maxPlayers": 64,
        "tickRate": 60,
        "password": 0,
        "needSameMods": 0,
        "allowMoreMods": 1,
        "currentPlayers": 12,
        "region": "EU",
        "country": "NL",
    }
    entry.update(overrides)
    return entry


@pytest.fixture
def server_entry():
    """Factory for Marne server entries: `server_entry(currentPlayers=3)`."""
    return make_server_entry


@pytest.fixture
def server_list_payload() -> Dict[str, Any]:
    return {
        "servers": [
            make_server_entry(id=1, name="Some Other Server", currentPlayers=30),
            make_server_entry(),
        ]
    }


@pytest.fixture
def online_status() -> ServerStatus:
    return ServerStatus(
        name=SERVER_NAME,
        server_id=SERVER_ID,
        player_count=12,
        max_players=64,
        is_online=True,
        map_name="Amiens",
        map_code="MP_Amiens",
        game_mode="CQ",
    )


# ============================================================================
# DISCORD.PY MOCK FIXTURES
# ============================================================================


@pytest.fixture
def mock_client(mocker):
    """
    Mock discord.Client for presence tests.

    Uses: PresenceUpdater tests that assert on change_presence / user.edit
    """
    client = mocker.MagicMock()
    client.change_presence = mocker.AsyncMock()
    client.user = mocker.MagicMock()
    client.user.id = 123456789
    client.user.edit = mocker.AsyncMock()
    return client


@pytest.fixture
def mock_banner_renderer(mocker):
    renderer = mocker.MagicMock()
    renderer.render = mocker.AsyncMock(return_value=b"banner-bytes")
    return renderer
