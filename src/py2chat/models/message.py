"""
Message models for py2chat.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class TextMessage:
    """
    A chat message received from the server.

    Attributes:
        sender: Username of the sender
        private: True for a private (direct) message, False for a public one
        text: Message body, internal whitespace preserved
    """

    sender: str
    private: bool
    text: str

    def __str__(self) -> str:
        """String representation for display."""
        prefix = "(private) " if self.private else ""
        return f"{prefix}{self.sender}: {self.text}"
