"""HTTP server for the badge endpoints."""

from .app import BadgeServer, run_server_sync
from .config import ServerConfig

__all__ = [
    "BadgeServer",
    "ServerConfig",
    "run_server_sync",
]
