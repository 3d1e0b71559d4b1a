"""
Background Protocol Reader for the chat client.

This module provides the read loop that drains the connection one line at a
time and turns every recognized server line into a listener event.

Architecture:
    ProtocolReader (background thread)
        └── TCPConnection.read_line() until the connection closes
        └── handle_line(): split command word, look up handler
        └── handler parses the payload and notifies the ListenerRegistry

Failure policy:
    - A failed read is fatal: the connection closes itself and the loop exits.
    - A malformed payload on a line that was read successfully is logged and
      skipped; the loop continues with the next line.
    - An unknown command word is ignored.
"""

import logging
import threading
from typing import Callable, Dict, Optional

from .errors import ProtocolError
from .listeners import ListenerRegistry
from .protocol import Commands, is_blank, require_text, split_command, split_list, split_sender
from .tcp_connection import TCPConnection
from py2chat.models.message import TextMessage

logger = logging.getLogger(__name__)


class ProtocolReader:
    """
    Reads server lines on a dedicated thread and dispatches events.

    Lines are handled strictly in arrival order. Listeners are called on the
    reader thread, so a slow listener delays every following line.
    """

    def __init__(self, connection: TCPConnection, listeners: ListenerRegistry):
        """
        Initialize the protocol reader.

        Args:
            connection: Open connection to read from
            listeners: Registry notified for every recognized event
        """
        self._connection = connection
        self._listeners = listeners
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        # Connection generation this reader serves, set by start()
        self._generation: Optional[int] = None

        self._handlers: Dict[str, Callable[[str, Optional[str]], None]] = {
            Commands.LOGIN_OK: self._on_login_ok,
            Commands.LOGIN_ERROR: self._on_login_error,
            Commands.PUBLIC_MESSAGE: self._on_public_message,
            Commands.PRIVATE_MESSAGE: self._on_private_message,
            Commands.MESSAGE_OK: self._on_message_ok,
            Commands.MESSAGE_ERROR: self._on_message_error,
            Commands.COMMAND_ERROR: self._on_command_error,
            Commands.USERS: self._on_users,
            Commands.SUPPORTED: self._on_supported,
        }

        # Statistics
        self._stats = {
            'lines_read': 0,
            'events_dispatched': 0,
            'malformed_lines': 0,
            'unknown_commands': 0,
        }

    def start(self) -> None:
        """Start the background reader thread."""
        with self._lock:
            if self.is_running():
                logger.warning("ProtocolReader already running")
                return

            self._generation = self._connection.generation
            self._thread = threading.Thread(
                target=self._read_loop,
                name="ProtocolReader",
                daemon=True
            )
            self._thread.start()
            logger.info("ProtocolReader background thread started")

    def is_running(self) -> bool:
        """Check if the reader thread is alive."""
        return self._thread is not None and self._thread.is_alive()

    @property
    def generation(self) -> Optional[int]:
        """Connection generation this reader was started on, None before start()."""
        return self._generation

    def serves_current_connection(self) -> bool:
        """True while the reader runs on the connection that is open now."""
        return self.is_running() and self._generation == self._connection.generation

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the read loop to exit.

        Returns:
            True if the thread has finished
        """
        if self._thread is None:
            return True
        if self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)
        return not self._thread.is_alive()

    def _read_loop(self) -> None:
        """Main read loop - runs in background thread."""
        logger.info("ProtocolReader read loop starting")

        # A reconnect starts a new reader, so leave the new connection to it
        while (self._connection.is_connected()
               and self._connection.generation == self._generation):
            line = self._connection.read_line(self._generation)
            if line is None:
                # Connection is gone (read_line() closed it) or was replaced
                break
            self.handle_line(line)

        logger.info(f"ProtocolReader read loop exiting. Stats: {self._stats}")

    def handle_line(self, line: str) -> bool:
        """
        Parse one server line and notify listeners.

        Never raises for protocol problems: malformed payloads and unknown
        commands are logged and counted.

        Args:
            line: One line without its terminator

        Returns:
            True if the line produced a recognized, well-formed command
        """
        self._stats['lines_read'] += 1
        command, remainder = split_command(line)

        handler = self._handlers.get(command)
        if handler is None:
            self._stats['unknown_commands'] += 1
            logger.debug(f"Ignoring unknown command {command!r}")
            return False

        try:
            handler(command, remainder)
        except ProtocolError as e:
            self._stats['malformed_lines'] += 1
            logger.warning(f"Skipping malformed line: {e.format_log_message()}")
            return False
        return True

    def get_stats(self) -> Dict[str, int]:
        """Get reader statistics, including listener failures."""
        stats = self._stats.copy()
        stats['listener_errors'] = self._listeners.get_stats()['listener_errors']
        return stats

    # ========== Command handlers ==========

    def _notify(self, method_name: str, *args) -> None:
        self._listeners.notify(method_name, *args)
        self._stats['events_dispatched'] += 1

    def _on_login_ok(self, command: str, remainder: Optional[str]) -> None:
        # State changes before listeners run, so a listener may send right away
        self._connection.mark_logged_in()
        self._notify('on_login_result', True, None)

    def _on_login_error(self, command: str, remainder: Optional[str]) -> None:
        message = "Login error" if is_blank(remainder) else remainder
        self._notify('on_login_result', False, message)

    def _on_public_message(self, command: str, remainder: Optional[str]) -> None:
        sender, text = split_sender(command, remainder)
        self._notify('on_message_received', TextMessage(sender, False, text))

    def _on_private_message(self, command: str, remainder: Optional[str]) -> None:
        sender, text = split_sender(command, remainder)
        self._notify('on_message_received', TextMessage(sender, True, text))

    def _on_message_ok(self, command: str, remainder: Optional[str]) -> None:
        logger.debug("Server accepted the last message")

    def _on_message_error(self, command: str, remainder: Optional[str]) -> None:
        self._notify('on_message_error', require_text(command, remainder))

    def _on_command_error(self, command: str, remainder: Optional[str]) -> None:
        self._notify('on_command_error', require_text(command, remainder))

    def _on_users(self, command: str, remainder: Optional[str]) -> None:
        self._notify('on_user_list', split_list(command, remainder))

    def _on_supported(self, command: str, remainder: Optional[str]) -> None:
        self._notify('on_supported_commands', split_list(command, remainder))
