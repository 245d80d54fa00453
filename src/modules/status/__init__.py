"""
Status Module
=============

Polls the Marne server list and produces one `ServerStatus` per tick.
"""

from src.modules.status.fetcher import StatusFetcher, parse_server_list
from src.modules.status.models import ServerStatus

__all__ = [
    "ServerStatus",
    "StatusFetcher",
    "parse_server_list",
]
