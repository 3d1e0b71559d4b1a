# src/py2chat/core/events.py
"""
Queue based event delivery.

ChatListener callbacks run on the reader thread. QueueListener turns each
callback into a ChatEvent on a queue, so the observer can consume events on
its own thread at its own pace.
"""
from dataclasses import dataclass
from enum import Enum
from queue import Queue, Empty
from typing import Any, List, Optional, Tuple
import logging

from .listeners import ChatListener


class EventKind(Enum):
    """Kinds of events produced by the chat client."""
    LOGIN_RESULT = "login_result"
    DISCONNECT = "disconnect"
    USER_LIST = "user_list"
    MESSAGE_RECEIVED = "message_received"
    MESSAGE_ERROR = "message_error"
    COMMAND_ERROR = "command_error"
    SUPPORTED_COMMANDS = "supported_commands"


@dataclass(frozen=True)
class ChatEvent:
    """
    One event received from the chat server.

    Attributes:
        kind: What happened
        payload: Callback arguments, in callback order
    """
    kind: EventKind
    payload: Tuple[Any, ...] = ()


class QueueListener(ChatListener):
    """
    Listener that puts every event on a queue.

    Attributes:
        events: The underlying queue (unbounded)
        logger: Logger instance
    """

    def __init__(self):
        """Initialize with an empty event queue."""
        self.logger = logging.getLogger(__name__)
        self.events: Queue = Queue()

    def _put(self, kind: EventKind, *payload) -> None:
        self.events.put_nowait(ChatEvent(kind, tuple(payload)))
        self.logger.debug(f"Queued {kind.value} event")

    def on_login_result(self, success, error_message):
        self._put(EventKind.LOGIN_RESULT, success, error_message)

    def on_disconnect(self):
        self._put(EventKind.DISCONNECT)

    def on_user_list(self, users):
        self._put(EventKind.USER_LIST, list(users))

    def on_message_received(self, message):
        self._put(EventKind.MESSAGE_RECEIVED, message)

    def on_message_error(self, error_message):
        self._put(EventKind.MESSAGE_ERROR, error_message)

    def on_command_error(self, error_message):
        self._put(EventKind.COMMAND_ERROR, error_message)

    def on_supported_commands(self, commands):
        self._put(EventKind.SUPPORTED_COMMANDS, list(commands))

    def get_event(self, timeout: Optional[float] = None) -> Optional[ChatEvent]:
        """
        Wait for the next event.

        Args:
            timeout: Maximum time to wait in seconds (None = wait forever)

        Returns:
            ChatEvent, or None if the timeout expired
        """
        try:
            return self.events.get(timeout=timeout)
        except Empty:
            return None

    def drain(self) -> List[ChatEvent]:
        """
        Remove and return every queued event without blocking.

        Returns:
            List[ChatEvent]: Events in arrival order
        """
        drained = []
        while True:
            try:
                drained.append(self.events.get_nowait())
            except Empty:
                break
        return drained
