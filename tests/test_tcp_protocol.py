"""
Unit tests for the chat line protocol helpers.

Tests command splitting, payload parsing and outbound command formatting.
"""

import unittest

from py2chat.core.errors import MalformedLineError, ProtocolError
from py2chat.core.protocol import (
    Commands,
    format_command,
    is_blank,
    require_text,
    split_command,
    split_list,
    split_sender,
)


class TestSplitCommand(unittest.TestCase):
    """Test splitting a line into command word and remainder."""

    def test_remainder_is_line_minus_token_and_one_separator(self):
        """Test that the remainder is everything after the first whitespace run."""
        lines = [
            "msg alice hello there",
            "privmsg bob  two  spaces ",
            "users\talice\tbob",
            "cmderr unknown command: foo",
            "supported   login msg privmsg users help",
        ]
        for line in lines:
            command, remainder = split_command(line)
            token = line.split()[0]
            self.assertEqual(command, token)
            rest = line[len(token):]
            stripped = rest.lstrip()
            self.assertEqual(remainder, stripped)

    def test_command_without_arguments(self):
        """Test that a bare command has no remainder."""
        self.assertEqual(split_command("loginok"), ("loginok", None))

    def test_empty_line(self):
        """Test that an empty line yields an empty command."""
        self.assertEqual(split_command(""), ("", None))

    def test_trailing_separator_gives_empty_remainder(self):
        """Test that 'users ' has an empty (not missing) remainder."""
        self.assertEqual(split_command("users "), ("users", ""))

    def test_leading_whitespace_gives_empty_command(self):
        """Test that a line starting with whitespace has no command word."""
        command, remainder = split_command("  msg alice hi")
        self.assertEqual(command, "")
        self.assertEqual(remainder, "msg alice hi")


class TestPayloadParsing(unittest.TestCase):
    """Test the structured payload helpers."""

    def test_split_list(self):
        """Test that a list payload splits into ordered tokens."""
        self.assertEqual(
            split_list(Commands.USERS, "alice bob carol"),
            ["alice", "bob", "carol"]
        )

    def test_split_list_collapses_whitespace(self):
        """Test that repeated whitespace does not create empty tokens."""
        self.assertEqual(split_list(Commands.USERS, "alice   bob "), ["alice", "bob"])

    def test_only_ascii_whitespace_separates_tokens(self):
        """Test that non-breaking and em spaces stay inside a token."""
        self.assertEqual(
            split_list(Commands.USERS, "ann\u00a0marie bob\u2003jr"),
            ["ann\u00a0marie", "bob\u2003jr"]
        )
        self.assertEqual(
            split_sender(Commands.PRIVATE_MESSAGE, "ann\u00a0marie hi there"),
            ("ann\u00a0marie", "hi there")
        )
        self.assertEqual(
            split_command("msg\u00a0alice hi"),
            ("msg\u00a0alice", "hi")
        )

    def test_unicode_space_is_not_blank(self):
        """Test that a payload of Unicode spaces counts as content."""
        self.assertTrue(is_blank(None))
        self.assertTrue(is_blank(" \t"))
        self.assertFalse(is_blank("\u00a0"))
        self.assertEqual(split_list(Commands.USERS, "\u00a0"), ["\u00a0"])
        self.assertEqual(require_text(Commands.COMMAND_ERROR, "\u2003"), "\u2003")

    def test_split_list_rejects_missing_payload(self):
        """Test that a missing or blank list payload is malformed."""
        for remainder in (None, "", "   "):
            with self.assertRaises(MalformedLineError) as ctx:
                split_list(Commands.USERS, remainder)
            self.assertEqual(ctx.exception.command, Commands.USERS)

    def test_split_sender_preserves_body(self):
        """Test that the message body keeps its internal whitespace."""
        sender, body = split_sender(Commands.PRIVATE_MESSAGE, "alice hello  there")
        self.assertEqual(sender, "alice")
        self.assertEqual(body, "hello  there")

    def test_split_sender_rejects_missing_body(self):
        """Test that a sender without a body is malformed."""
        for remainder in (None, "", "alice", "alice "):
            with self.assertRaises(MalformedLineError):
                split_sender(Commands.PUBLIC_MESSAGE, remainder)

    def test_malformed_line_is_protocol_error(self):
        """Test that MalformedLineError records the offending line."""
        with self.assertRaises(ProtocolError) as ctx:
            split_sender(Commands.PUBLIC_MESSAGE, "alice")
        self.assertEqual(ctx.exception.line, "msg alice")
        self.assertEqual(ctx.exception.context['category'], 'PROTOCOL')

    def test_require_text(self):
        """Test that a description payload is returned verbatim."""
        self.assertEqual(
            require_text(Commands.MESSAGE_ERROR, "no such user: bob"),
            "no such user: bob"
        )
        with self.assertRaises(MalformedLineError):
            require_text(Commands.COMMAND_ERROR, None)


class TestFormatCommand(unittest.TestCase):
    """Test outbound command formatting."""

    def test_command_with_arguments(self):
        self.assertEqual(format_command(Commands.LOGIN, "alice"), "login alice")
        self.assertEqual(
            format_command(Commands.PRIVATE_MESSAGE, "bob", "see you  later"),
            "privmsg bob see you  later"
        )

    def test_command_without_arguments(self):
        self.assertEqual(format_command(Commands.USERS), "users")
        self.assertEqual(format_command(Commands.HELP), "help")


if __name__ == '__main__':
    unittest.main()
