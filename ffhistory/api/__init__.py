from . import client, loader
from .client import RateLimiter, SleeperClient
from .loader import load_league_history, read_snapshot, read_supplement, write_snapshot

__all__ = [
    "client",
    "loader",
    "RateLimiter",
    "SleeperClient",
    "load_league_history",
    "read_snapshot",
    "read_supplement",
    "write_snapshot",
]
