"""
WebSocket server and event handling for the 99 game.
"""

from .events import parse_inbound_event
from .server import create_app

__all__ = ["create_app", "parse_inbound_event"]
