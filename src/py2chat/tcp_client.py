# src/py2chat/tcp_client.py
"""
Chat client facade.

Ties together the connection manager, the background protocol reader and
the listener registry, and formats the outbound commands of the chat
protocol.
"""

import logging
from typing import Optional

from py2chat.core.listeners import ChatListener, ListenerRegistry
from py2chat.core.protocol import Commands, format_command
from py2chat.core.socket_reader import ProtocolReader
from py2chat.core.tcp_connection import TCPConnection


class TCPClient:
    """
    Client for a line based chat server.

    Example:
        >>> client = TCPClient()
        >>> client.add_listener(my_listener)
        >>> if client.connect("localhost", 1300):
        ...     client.start_listen_thread()
        ...     client.try_login("alice")
        ...     client.send_public_message("hello everyone")
        >>> client.disconnect()
    """

    # Seconds to wait for the reader of a closed connection to exit
    STALE_READER_TIMEOUT = 2.0

    def __init__(self, connection: Optional[TCPConnection] = None):
        """
        Initialize the client.

        Args:
            connection: Connection manager to use (a new one by default)
        """
        self.logger = logging.getLogger(__name__)
        self._connection = connection or TCPConnection()
        self._listeners = ListenerRegistry()
        self._reader: Optional[ProtocolReader] = None
        self._connection.set_disconnect_callback(self._on_disconnect)

    @property
    def connection(self) -> TCPConnection:
        """The underlying connection manager."""
        return self._connection

    @property
    def reader(self) -> Optional[ProtocolReader]:
        """Reader of the current connection, None before start_listen_thread()."""
        return self._reader

    def connect(self, host: str, port: int) -> bool:
        """
        Connect to a chat server.

        Args:
            host: Host name or IP address of the chat server
            port: TCP port of the chat server

        Returns:
            True on success, False otherwise (see get_last_error())
        """
        return self._connection.connect(host, port)

    def disconnect(self) -> None:
        """Close the connection. Listeners get on_disconnect() once."""
        self._connection.disconnect()

    def is_connection_active(self) -> bool:
        """True while the connection is open."""
        return self._connection.is_connected()

    def is_logged_in(self) -> bool:
        """True once the server confirmed our login on this connection."""
        return self._connection.is_logged_in()

    def send_command(self, command: str, *args: str) -> bool:
        """
        Send a command to the server.

        Args:
            command: Command word
            *args: Command arguments, joined with single spaces

        Returns:
            True on success, False otherwise
        """
        return self._connection.send_line(format_command(command, *args))

    def try_login(self, username: str) -> bool:
        """
        Send a login request. The result arrives as on_login_result().

        Returns:
            True if the request was sent
        """
        return self.send_command(Commands.LOGIN, username)

    def send_public_message(self, message: str) -> bool:
        """
        Send a message to all connected users.

        Returns:
            True if the message was sent, False on error
        """
        return self.send_command(Commands.PUBLIC_MESSAGE, message)

    def send_private_message(self, recipient: str, message: str) -> bool:
        """
        Send a message to a single user.

        Args:
            recipient: Username of the user who should receive the message
            message: Message to send

        Returns:
            True if the message was sent, False on error
        """
        return self.send_command(Commands.PRIVATE_MESSAGE, recipient, message)

    def refresh_user_list(self) -> bool:
        """
        Request the list of connected users.

        The answer arrives as on_user_list() and replaces the previous list.
        """
        return self.send_command(Commands.USERS)

    def ask_supported_commands(self) -> bool:
        """Request the list of commands the server supports."""
        return self.send_command(Commands.HELP)

    def start_listen_thread(self) -> ProtocolReader:
        """
        Start reading server lines on a background thread.

        After a reconnect the reader of the previous connection may still be
        winding down; it is joined and replaced by a fresh one.

        Returns:
            The reader serving the current connection
        """
        previous = self._reader
        if previous is not None and previous.is_running():
            if previous.serves_current_connection():
                self.logger.warning("Listen thread already running")
                return previous
            if not previous.join(timeout=self.STALE_READER_TIMEOUT):
                self.logger.warning("Listen thread of the previous connection did not exit")

        self._reader = ProtocolReader(self._connection, self._listeners)
        self._reader.start()
        return self._reader

    def add_listener(self, listener: ChatListener) -> bool:
        """Register a listener for chat events. Duplicates are ignored."""
        return self._listeners.add_listener(listener)

    def remove_listener(self, listener: ChatListener) -> bool:
        """Unregister a listener."""
        return self._listeners.remove_listener(listener)

    def get_last_error(self) -> str:
        """
        Get the last error message.

        Returns:
            Error message or "" if there has been no error
        """
        return self._connection.get_last_error()

    def _on_disconnect(self) -> None:
        self._listeners.notify('on_disconnect')
