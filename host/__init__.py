"""Asyncio runtime around the rules core: serialized table sessions and the WebSocket bridge."""

from .server import TableConnection, run_server
from .session import TableSession

__all__ = ["TableSession", "TableConnection", "run_server"]
