"""
Unit tests for the Marne status fetcher.

Parsing is tested directly; HTTP behavior is tested against an in-process
aiohttp server standing in for marne.io.
"""

import json

import aiohttp
import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from src.core.config.config import Game
from src.core.exceptions import FetchError
from src.modules.status.fetcher import StatusFetcher, parse_server_list

SERVER_NAME = "[EU] Marne Test Server"


# ============================================================================
# FIXTURES
# ============================================================================


@pytest_asyncio.fixture
async def marne_api():
    """
    Fake Marne API serving whatever `responses[path]` holds.

    Each value is a `(status, body_bytes)` tuple.
    """
    responses = {}

    async def handler(request: web.Request) -> web.Response:
        status, body = responses[request.path]
        return web.Response(status=status, body=body, content_type="application/json")

    app = web.Application()
    app.router.add_get("/api/srvlst/", handler)
    app.router.add_get("/api/v/srvlst/", handler)

    server = TestServer(app)
    await server.start_server()
    yield server, responses
    await server.close()


@pytest_asyncio.fixture
async def fetcher(marne_api):
    server, _ = marne_api
    urls = {
        Game.BF1: str(server.make_url("/api/srvlst/")),
        Game.BFV: str(server.make_url("/api/v/srvlst/")),
    }
    async with aiohttp.ClientSession() as session:
        yield StatusFetcher(session, urls=urls)


# ============================================================================
# PARSING
# ============================================================================


@pytest.mark.unit
class TestParseServerList:
    def test_finds_server_by_name(self, server_list_payload):
        status = parse_server_list(server_list_payload, SERVER_NAME)

        assert status.is_online is True
        assert status.player_count == 12
        assert status.max_players == 64

    def test_finds_server_by_id(self, server_list_payload):
        status = parse_server_list(server_list_payload, 4242)

        assert status.name == SERVER_NAME
        assert status.server_id == 4242

    def test_resolves_map_and_mode(self, server_list_payload):
        status = parse_server_list(server_list_payload, SERVER_NAME)

        assert status.map_code == "MP_Amiens"
        assert status.map_name == "Amiens"
        assert status.game_mode == "CQ"

    def test_unknown_map_falls_back_to_code(self, server_entry):
        payload = {"servers": [server_entry(mapName="Levels/MP_Secret", gameMode="Mystery0")]}

        status = parse_server_list(payload, SERVER_NAME)

        assert status.map_name == "MP_Secret"
        assert status.game_mode == ""

    def test_missing_server_is_offline(self, server_list_payload):
        status = parse_server_list(server_list_payload, "Not Listed")

        assert status.is_online is False
        assert status.name == "Not Listed"
        assert status.player_count == 0

    def test_missing_server_by_id_is_offline(self, server_list_payload):
        status = parse_server_list(server_list_payload, 9999)

        assert status.is_online is False
        assert status.server_id == 9999

    def test_payload_without_servers_list(self):
        with pytest.raises(FetchError):
            parse_server_list({"error": "maintenance"}, SERVER_NAME)

    def test_negative_player_count(self, server_entry):
        payload = {"servers": [server_entry(currentPlayers=-1)]}

        with pytest.raises(FetchError):
            parse_server_list(payload, SERVER_NAME)

    def test_missing_player_count(self, server_entry):
        entry = server_entry()
        del entry["currentPlayers"]

        with pytest.raises(FetchError):
            parse_server_list({"servers": [entry]}, SERVER_NAME)


# ============================================================================
# HTTP
# ============================================================================


@pytest.mark.unit
@pytest.mark.asyncio
class TestStatusFetcher:
    async def test_fetch_success(self, marne_api, fetcher, server_list_payload):
        _, responses = marne_api
        responses["/api/srvlst/"] = (200, json.dumps(server_list_payload).encode())

        status = await fetcher.fetch(SERVER_NAME, Game.BF1)

        assert status.player_count == 12
        assert status.max_players == 64

    async def test_fetch_uses_bfv_list(self, marne_api, fetcher, server_entry):
        _, responses = marne_api
        payload = {"servers": [server_entry(mapName="Levels/MP/MP_Crete", currentPlayers=5)]}
        responses["/api/v/srvlst/"] = (200, json.dumps(payload).encode())

        status = await fetcher.fetch(SERVER_NAME, Game.BFV)

        assert status.player_count == 5
        assert status.map_name == "Mercury"

    async def test_fetch_strips_byte_order_mark(self, marne_api, fetcher, server_list_payload):
        _, responses = marne_api
        body = b"\xef\xbb\xbf" + json.dumps(server_list_payload).encode()
        responses["/api/srvlst/"] = (200, body)

        status = await fetcher.fetch(SERVER_NAME, Game.BF1)

        assert status.is_online is True

    async def test_server_error_raises_fetch_error(self, marne_api, fetcher):
        _, responses = marne_api
        responses["/api/srvlst/"] = (500, b'{"error": "boom"}')

        with pytest.raises(FetchError) as exc_info:
            await fetcher.fetch(SERVER_NAME, Game.BF1)

        assert exc_info.value.status == 500
        assert exc_info.value.is_retryable is True

    async def test_invalid_json_raises_fetch_error(self, marne_api, fetcher):
        _, responses = marne_api
        responses["/api/srvlst/"] = (200, b"<html>maintenance</html>")

        with pytest.raises(FetchError):
            await fetcher.fetch(SERVER_NAME, Game.BF1)

    async def test_connection_error_raises_fetch_error(self, mocker):
        session = mocker.MagicMock()
        session.get = mocker.MagicMock(side_effect=aiohttp.ClientConnectionError("refused"))

        with pytest.raises(FetchError) as exc_info:
            await StatusFetcher(session).fetch(SERVER_NAME, Game.BF1)

        assert exc_info.value.url == "https://marne.io/api/srvlst/"
        assert exc_info.value.status is None
