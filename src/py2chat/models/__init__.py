# Models package
from .connection import ConnectionConfig, ConnectionState, ConnectionStatus
from .message import TextMessage

__all__ = [
    'ConnectionConfig',
    'ConnectionState',
    'ConnectionStatus',
    'TextMessage',
]
