"""
Line protocol helpers for the chat client.

The chat protocol is plain text: one command per line, terminated by a
newline, with the command word and its arguments separated by whitespace.

Line Structure:
    <command> [<remainder>]

Some inbound commands carry a structured remainder:
    - list payload:          users alice bob carol
    - sender + body payload: privmsg alice hello there
"""

import re
from typing import List, Optional, Tuple

from .errors import MalformedLineError

# A single run of ASCII whitespace separates the command word from its
# arguments. Other Unicode spaces (e.g. U+00A0) are part of a token.
_SEPARATOR = re.compile(r"\s+", re.ASCII)


class Commands:
    """Command words of the chat protocol."""

    # Outbound (client -> server)
    LOGIN = "login"
    HELP = "help"

    # Both directions
    PUBLIC_MESSAGE = "msg"
    PRIVATE_MESSAGE = "privmsg"
    USERS = "users"

    # Inbound (server -> client)
    LOGIN_OK = "loginok"
    LOGIN_ERROR = "loginerr"
    MESSAGE_OK = "msgok"
    MESSAGE_ERROR = "msgerr"
    COMMAND_ERROR = "cmderr"
    SUPPORTED = "supported"


def split_command(line: str) -> Tuple[str, Optional[str]]:
    """
    Split a line into its command word and the undivided remainder.

    The remainder is everything after the first whitespace run, verbatim.

    Args:
        line: One line of text without its terminator

    Returns:
        Tuple of (command, remainder). The remainder is None when the line
        has no separator at all.

    Example:
        >>> split_command("privmsg alice hello  there")
        ('privmsg', 'alice hello  there')
        >>> split_command("loginok")
        ('loginok', None)
        >>> split_command("")
        ('', None)
    """
    parts = _SEPARATOR.split(line, maxsplit=1)
    if len(parts) == 1:
        return parts[0], None
    return parts[0], parts[1]


def split_list(command: str, remainder: Optional[str]) -> List[str]:
    """
    Split a list payload into independent tokens.

    Raises:
        MalformedLineError: If the payload is missing or blank
    """
    tokens = [token for token in _SEPARATOR.split(remainder or "") if token]
    if not tokens:
        raise MalformedLineError(
            f"'{command}' requires a list payload",
            command=command,
            line=_rebuild(command, remainder)
        )
    return tokens


def split_sender(command: str, remainder: Optional[str]) -> Tuple[str, str]:
    """
    Split a "sender + body" payload into the sender and the verbatim body.

    Whitespace inside the body is preserved.

    Raises:
        MalformedLineError: If the sender or the body is missing
    """
    if remainder is None:
        raise MalformedLineError(
            f"'{command}' requires a sender and a body",
            command=command,
            line=command
        )
    parts = _SEPARATOR.split(remainder, maxsplit=1)
    if len(parts) < 2 or not parts[0] or not parts[1]:
        raise MalformedLineError(
            f"'{command}' requires a sender and a body",
            command=command,
            line=_rebuild(command, remainder)
        )
    return parts[0], parts[1]


def require_text(command: str, remainder: Optional[str]) -> str:
    """
    Return a free-text payload such as an error description.

    Raises:
        MalformedLineError: If the payload is missing or blank
    """
    if is_blank(remainder):
        raise MalformedLineError(
            f"'{command}' requires a description",
            command=command,
            line=_rebuild(command, remainder)
        )
    return remainder


def is_blank(text: Optional[str]) -> bool:
    """True if text is None, empty or only ASCII whitespace."""
    return not text or _SEPARATOR.fullmatch(text) is not None


def format_command(command: str, *args: str) -> str:
    """
    Build an outbound command line (without the line terminator).

    Example:
        >>> format_command(Commands.PRIVATE_MESSAGE, "bob", "see you")
        'privmsg bob see you'
        >>> format_command(Commands.USERS)
        'users'
    """
    return " ".join([command, *args])


def _rebuild(command: str, remainder: Optional[str]) -> str:
    if remainder is None:
        return command
    return f"{command} {remainder}"
