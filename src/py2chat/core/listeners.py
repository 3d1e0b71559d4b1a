"""
Listener interface and registry for chat events.

Events are "information received from the chat server". Every registered
listener is notified in registration order, synchronously, on the thread
that produced the event (normally the background ProtocolReader).
Listeners must return quickly or they stall further reads.
"""

import logging
import threading
from typing import List, Optional

from py2chat.models.message import TextMessage

logger = logging.getLogger(__name__)


class ChatListener:
    """
    Capability set for chat event observers.

    All methods are no-ops, so subclasses override only the events they
    care about.
    """

    def on_login_result(self, success: bool, error_message: Optional[str]) -> None:
        """Login finished; error_message is None on success."""

    def on_disconnect(self) -> None:
        """The connection was closed, locally or by the remote end."""

    def on_user_list(self, users: List[str]) -> None:
        """
        The server sent the list of currently connected users.

        The list replaces any previously received one.
        """

    def on_message_received(self, message: TextMessage) -> None:
        """A public or private message arrived."""

    def on_message_error(self, error_message: str) -> None:
        """Our last message was not delivered."""

    def on_command_error(self, error_message: str) -> None:
        """The server did not understand our last command."""

    def on_supported_commands(self, commands: List[str]) -> None:
        """The server answered a help request."""


class ListenerRegistry:
    """
    Ordered set of listeners, deduplicated by identity.

    Registration can happen from any thread while the reader is notifying;
    notification iterates over a snapshot taken under the lock.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._listeners: List[ChatListener] = []
        self._stats = {
            'notifications': 0,
            'listener_errors': 0,
        }

    def add_listener(self, listener: ChatListener) -> bool:
        """
        Register a listener.

        Returns:
            True if added, False if this exact object was already registered
        """
        with self._lock:
            if any(existing is listener for existing in self._listeners):
                return False
            self._listeners.append(listener)
        logger.debug(f"Registered listener {listener!r}")
        return True

    def remove_listener(self, listener: ChatListener) -> bool:
        """
        Unregister a listener.

        Returns:
            True if removed, False if it was not registered
        """
        with self._lock:
            for index, existing in enumerate(self._listeners):
                if existing is listener:
                    del self._listeners[index]
                    logger.debug(f"Unregistered listener {listener!r}")
                    return True
        return False

    def notify(self, method_name: str, *args) -> int:
        """
        Call method_name(*args) on every listener in registration order.

        A listener that raises is logged and skipped; the remaining
        listeners are still notified.

        Returns:
            Number of listeners notified without error
        """
        with self._lock:
            listeners = list(self._listeners)

        delivered = 0
        for listener in listeners:
            try:
                getattr(listener, method_name)(*args)
                delivered += 1
            except Exception as e:
                self._stats['listener_errors'] += 1
                logger.error(f"Listener {listener!r} failed in {method_name}: {e}", exc_info=True)
        self._stats['notifications'] += 1
        return delivered

    def get_stats(self):
        """Get notification statistics."""
        return self._stats.copy()

    def __len__(self) -> int:
        with self._lock:
            return len(self._listeners)
