"""
TCP Connection management for chat server communication.

This module owns the single socket to the chat server and exposes line
based send/receive operations on it. The input and output directions of the
socket are independent, so one thread may block in read_line() while another
calls send_line(). The lock guards connection state, never a blocking read.

Failures never propagate to the caller: every operation reports success with
its return value and records what went wrong in a single last-error slot.
"""

import socket
import logging
import threading
from datetime import datetime
from typing import Callable, Optional, Tuple

from .errors import (
    ChatError,
    ConnectionError,
    ErrorCodes,
    ValidationError,
    wrap_external_error,
)
from py2chat.models.connection import ConnectionConfig, ConnectionState, ConnectionStatus


class TCPConnection:
    """
    Manages the TCP socket connection to a chat server.

    Example:
        >>> connection = TCPConnection()
        >>> if connection.connect("localhost", 1300):
        ...     connection.send_line("login alice")
        ...     print(connection.read_line())
        ... else:
        ...     print(connection.get_last_error())
        >>> connection.disconnect()
    """

    ENCODING = "utf-8"

    def __init__(self):
        """Initialize a disconnected connection manager."""
        self._socket: Optional[socket.socket] = None
        self._reader = None
        self._lock = threading.RLock()
        self._send_lock = threading.Lock()
        self._connected = False
        self._logged_in = False
        # Bumped by every successful connect()
        self._generation = 0
        self.logger = logging.getLogger(__name__)

        # Connection info
        self._host: Optional[str] = None
        self._port: Optional[int] = None
        self._connected_at: Optional[datetime] = None

        self._last_error: Optional[ChatError] = None
        self._on_disconnect: Optional[Callable[[], None]] = None

    def set_disconnect_callback(self, callback: Optional[Callable[[], None]]) -> None:
        """
        Set the function called once each time an open connection closes.

        The callback runs inside the close critical section, on whichever
        thread performed the close.
        """
        self._on_disconnect = callback

    def connect(self, host: str, port: int, timeout: Optional[float] = None) -> bool:
        """
        Connect to a chat server.

        Args:
            host: Host name or IP address of the chat server
            port: TCP port of the chat server
            timeout: Optional connect timeout in seconds (None = block)

        Returns:
            True on success, False otherwise (see get_last_error())
        """
        config = ConnectionConfig(host, port, timeout)
        valid, errors = config.validate()
        if not valid:
            self._record_error(ValidationError(
                f"Invalid connection settings: {'; '.join(errors)}",
                error_code=ErrorCodes.INVALID_PARAMETER,
                context={'host': host, 'port': port}
            ))
            return False

        with self._lock:
            if self._connected:
                self._record_error(ConnectionError(
                    "Already connected!",
                    error_code=ErrorCodes.ALREADY_CONNECTED,
                    context={'host': self._host, 'port': self._port}
                ))
                return False

            try:
                self.logger.info(f"Connecting to {host}:{port}")
                sock = socket.create_connection((host, port), timeout=timeout)
                sock.settimeout(None)  # Reads block until data or close
            except OSError as e:
                self._record_error(wrap_external_error(
                    e, "Could not connect to the server", ConnectionError,
                    host=host, port=port
                ))
                return False

            self._socket = sock
            self._reader = sock.makefile("r", encoding=self.ENCODING,
                                         errors="replace", newline="\n")
            self._host = host
            self._port = port
            self._connected_at = datetime.now()
            self._logged_in = False
            self._generation += 1
            self._connected = True
            self.logger.info(f"Connected to {host}:{port}")
            return True

    def disconnect(self) -> None:
        """
        Close the connection.

        Safe to call any number of times and from several threads at once,
        e.g. the caller pressing "disconnect" while the reader thread hits
        a socket error on the same connection. Only the first call closes
        the socket and fires the disconnect callback.
        """
        with self._lock:
            self._close()

    def _close(self) -> None:
        """Close the open connection, if any. Caller holds self._lock."""
        if not self._connected:
            return

        self._connected = False
        self._logged_in = False
        sock, reader = self._socket, self._reader
        host, port = self._host, self._port
        self._socket = None
        self._reader = None
        self._host = None
        self._port = None
        self._connected_at = None

        # Shutting down first wakes up a reader blocked in recv()
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError as e:
            self.logger.debug(f"Socket shutdown: {e}")

        try:
            sock.close()
            reader.close()
        except (OSError, ValueError) as e:
            self.logger.error(f"Error closing socket: {e}")

        self.logger.info(f"Disconnected from {host}:{port}")

        callback = self._on_disconnect
        if callback is not None:
            try:
                callback()
            except Exception as e:
                self.logger.error(f"Disconnect callback failed: {e}", exc_info=True)

    def is_connected(self) -> bool:
        """
        Check if the connection is open.

        Returns:
            True if a socket to the server is open
        """
        return self._connected

    @property
    def generation(self) -> int:
        """Number of the current (or last) connection; changes on every connect()."""
        return self._generation

    def is_logged_in(self) -> bool:
        """Check if the server confirmed our login on this connection."""
        return self._connected and self._logged_in

    def mark_logged_in(self) -> None:
        """Record that the server accepted our login."""
        if self._connected:
            self._logged_in = True
            self.logger.info("Login confirmed by server")

    def send_line(self, text: str) -> bool:
        """
        Send one command line to the server.

        The line terminator is appended here. A write failure means the
        connection is dead, so it is closed.

        Args:
            text: Command word plus arguments, without a newline

        Returns:
            True on success, False otherwise (see get_last_error())
        """
        if "\n" in text or "\r" in text:
            self._record_error(ValidationError(
                "A command must fit on a single line",
                error_code=ErrorCodes.INVALID_PARAMETER,
                field_name="text"
            ))
            return False

        with self._lock:
            sock, generation = self._socket, self._generation
            if not self._connected or sock is None:
                self._record_not_connected("send")
                return False

        try:
            with self._send_lock:
                sock.sendall(f"{text}\n".encode(self.ENCODING))
        except OSError as e:
            self._close_after_failure(generation, wrap_external_error(
                e, "Could not send command", ConnectionError,
                command=text.split(" ", 1)[0]
            ))
            return False

        self.logger.debug(f">> {text}")
        return True

    def read_line(self, generation: Optional[int] = None) -> Optional[str]:
        """
        Wait for one line from the server.

        Blocks until a full line arrives, the server closes the connection,
        or disconnect() is called from another thread.

        Args:
            generation: Only read if this is still the open connection
                (see the generation property). None reads from any.

        Returns:
            The line without its terminator, or None if nothing can be read
            any more. A read error or end of stream closes the connection.
        """
        with self._lock:
            if generation is not None and generation != self._generation:
                return None
            reader, generation = self._reader, self._generation
            if not self._connected or reader is None:
                # Keep the error that explains why the connection went away
                if self._last_error is None:
                    self._record_not_connected("read")
                else:
                    self.logger.debug("read_line() called after the connection closed")
                return None

        try:
            line = reader.readline()
        except (OSError, ValueError) as e:
            self._close_after_failure(generation, wrap_external_error(
                e, "Reading from socket failed", ConnectionError
            ))
            return None

        if not line:
            self._close_after_failure(generation, ConnectionError(
                "Connection closed by the server",
                error_code=ErrorCodes.CONNECTION_LOST
            ))
            return None

        if line.endswith("\n"):
            line = line[:-1]
        if line.endswith("\r"):
            line = line[:-1]
        self.logger.debug(f"<< {line}")
        return line

    def get_last_error(self) -> str:
        """
        Get the last error message.

        Returns:
            Error message or "" if there has been no error
        """
        error = self._last_error
        if error is None:
            return ""
        return error.format_user_message()

    @property
    def last_error(self) -> Optional[ChatError]:
        """The last recorded error object, or None."""
        return self._last_error

    def get_connection_info(self) -> Tuple[Optional[str], Optional[int]]:
        """
        Get current connection information.

        Returns:
            Tuple of (host, port) or (None, None) if not connected
        """
        with self._lock:
            return self._host, self._port

    def get_status(self) -> ConnectionStatus:
        """Snapshot of the connection for display."""
        with self._lock:
            if not self._connected:
                state = ConnectionState.DISCONNECTED
            elif self._logged_in:
                state = ConnectionState.LOGGED_IN
            else:
                state = ConnectionState.CONNECTED
            return ConnectionStatus(
                state=state,
                host=self._host,
                port=self._port,
                connected_at=self._connected_at,
                last_error=self.get_last_error() or None
            )

    def _close_after_failure(self, generation: int, error: ChatError) -> None:
        """
        Record a transport failure and close the connection it happened on.

        A failure on a stream that disconnect() already closed is expected,
        and if connect() opened a new connection in the meantime that one
        must stay open. Both cases are only logged.
        """
        with self._lock:
            if not self._connected or self._generation != generation:
                self.logger.debug(f"Ignoring failure on a closed connection: {error}")
                return
            self._record_error(error)
            self._close()

    def _record_not_connected(self, operation: str) -> None:
        self._record_error(ConnectionError(
            "Not connected to a server",
            error_code=ErrorCodes.NOT_CONNECTED,
            context={'operation': operation}
        ), level=logging.WARNING)

    def _record_error(self, error: ChatError, level: int = logging.ERROR) -> None:
        """Overwrite the last-error slot and log the error."""
        self._last_error = error
        self.logger.log(level, error.format_log_message())
