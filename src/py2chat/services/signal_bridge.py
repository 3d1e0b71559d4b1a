"""
Signal Bridge - Re-emits chat events as Qt signals.

Chat listeners are called on the background reader thread. A Qt front end
must not touch widgets from that thread, so this bridge turns every event
into a pyqtSignal. Slots living in the GUI thread then receive the event
through Qt's queued connections, in the GUI thread.
"""

import logging
from typing import List, Optional

from PyQt5.QtCore import QObject, pyqtSignal

from py2chat.core.listeners import ChatListener
from py2chat.models.message import TextMessage


class ChatSignalBridge(QObject, ChatListener):
    """
    ChatListener that forwards each callback to a Qt signal.

    Signals:
        login_result: (success: bool, error_message: str), "" on success
        disconnected: ()
        user_list: (users: list)
        message_received: (message: TextMessage)
        message_error: (error_message: str)
        command_error: (error_message: str)
        supported_commands: (commands: list)
    """

    login_result = pyqtSignal(bool, str)
    disconnected = pyqtSignal()
    user_list = pyqtSignal(list)
    message_received = pyqtSignal(object)
    message_error = pyqtSignal(str)
    command_error = pyqtSignal(str)
    supported_commands = pyqtSignal(list)

    def __init__(self, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.logger = logging.getLogger(__name__)

    def on_login_result(self, success: bool, error_message: Optional[str]) -> None:
        self.login_result.emit(success, error_message or "")

    def on_disconnect(self) -> None:
        self.disconnected.emit()

    def on_user_list(self, users: List[str]) -> None:
        self.user_list.emit(list(users))

    def on_message_received(self, message: TextMessage) -> None:
        self.message_received.emit(message)

    def on_message_error(self, error_message: str) -> None:
        self.message_error.emit(error_message)

    def on_command_error(self, error_message: str) -> None:
        self.command_error.emit(error_message)

    def on_supported_commands(self, commands: List[str]) -> None:
        self.supported_commands.emit(list(commands))
