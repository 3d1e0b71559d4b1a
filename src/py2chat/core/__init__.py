"""
Core layer for chat server communication.

This package contains the line protocol, the connection manager and the
background reader that turns server lines into listener events.
"""

from .errors import ChatError, MalformedLineError, ProtocolError
from .events import ChatEvent, EventKind, QueueListener
from .listeners import ChatListener, ListenerRegistry
from .protocol import Commands, format_command, split_command
from .socket_reader import ProtocolReader
from .tcp_connection import TCPConnection

__all__ = [
    'ChatError',
    'MalformedLineError',
    'ProtocolError',
    'ChatEvent',
    'EventKind',
    'QueueListener',
    'ChatListener',
    'ListenerRegistry',
    'Commands',
    'format_command',
    'split_command',
    'ProtocolReader',
    'TCPConnection',
]
