"""
Connection models for py2chat.

This module provides data structures for describing a TCP connection to a
chat server.

Classes:
    ConnectionConfig: Immutable configuration for a connection
    ConnectionState: Enumeration of connection states
    ConnectionStatus: Current status of a connection
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class ConnectionConfig:
    """
    Immutable configuration for a TCP connection.

    Attributes:
        host: Host name or IP address of the chat server
        port: TCP port of the chat server (1-65535)
        timeout: Connect timeout in seconds, None to block until the
                 server answers or refuses

    Example:
        >>> config = ConnectionConfig("localhost", 1300)
        >>> valid, errors = config.validate()
        >>> if not valid:
        ...     print(f"Validation errors: {errors}")
    """

    host: str
    port: int
    timeout: Optional[float] = None

    def validate(self) -> Tuple[bool, List[str]]:
        """
        Validate the connection configuration.

        Returns:
            Tuple of (is_valid, list_of_error_messages)

        Validation rules:
            - Host must be a non-empty string
            - Port must be an integer in range 1-65535
            - Timeout must be None or positive

        Example:
            >>> config = ConnectionConfig("", 99999, -1.0)
            >>> valid, errors = config.validate()
            >>> print(errors)
            ['Host must not be empty',
             'Port out of range (1-65535): 99999',
             'Timeout must be positive: -1.0']
        """
        errors = []

        if not isinstance(self.host, str) or not self.host.strip():
            errors.append("Host must not be empty")

        if isinstance(self.port, bool) or not isinstance(self.port, int):
            errors.append(f"Port must be an integer, got {type(self.port).__name__}")
        elif not (1 <= self.port <= 65535):
            errors.append(f"Port out of range (1-65535): {self.port}")

        if self.timeout is not None and self.timeout <= 0:
            errors.append(f"Timeout must be positive: {self.timeout}")

        return (len(errors) == 0, errors)


class ConnectionState(Enum):
    """
    Enumeration of possible connection states.

    States:
        DISCONNECTED: No channel to the server
        CONNECTED: Channel open, login not yet confirmed
        LOGGED_IN: Channel open and the server accepted our username
    """

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    LOGGED_IN = "logged_in"


@dataclass
class ConnectionStatus:
    """
    Current status of a connection.

    Attributes:
        state: Current connection state
        host: Host if connected, None otherwise
        port: Port number if connected, None otherwise
        connected_at: Timestamp when connection was established
        last_error: Last recorded error message, None if there was none
    """

    state: ConnectionState
    host: Optional[str] = None
    port: Optional[int] = None
    connected_at: Optional[datetime] = None
    last_error: Optional[str] = None
