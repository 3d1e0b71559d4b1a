# py2chat package
"""Client for a line based TCP chat protocol."""

__version__ = "0.1.0"

from .tcp_client import TCPClient
from .core.listeners import ChatListener
from .models.message import TextMessage

__all__ = [
    "TCPClient",
    "ChatListener",
    "TextMessage",
]
