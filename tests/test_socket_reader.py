"""
Unit tests for the background ProtocolReader.

The reader is driven by a scripted in-memory connection so that every
dispatch rule can be checked without sockets.
"""

import unittest
from typing import List, Optional

from py2chat.core.listeners import ChatListener, ListenerRegistry
from py2chat.core.socket_reader import ProtocolReader
from py2chat.models.message import TextMessage
from tests.mock_chat_server import RecordingListener


class ScriptedConnection:
    """Connection stand-in that returns a fixed list of lines, then closes."""

    def __init__(self, lines: Optional[List[str]] = None):
        self.lines = list(lines or [])
        self.connected = True
        self.logged_in = False
        self.disconnects = 0
        self.generation = 1

    def is_connected(self) -> bool:
        return self.connected

    def is_logged_in(self) -> bool:
        return self.logged_in

    def mark_logged_in(self) -> None:
        self.logged_in = True

    def read_line(self, generation: Optional[int] = None) -> Optional[str]:
        if not self.lines:
            self.connected = False
            self.disconnects += 1
            return None
        return self.lines.pop(0)


class TestProtocolReaderDispatch(unittest.TestCase):
    """Test how single lines are turned into listener events."""

    def setUp(self):
        self.connection = ScriptedConnection()
        self.registry = ListenerRegistry()
        self.listener = RecordingListener()
        self.registry.add_listener(self.listener)
        self.reader = ProtocolReader(self.connection, self.registry)

    def test_login_ok_marks_logged_in_before_notifying(self):
        """Test that listeners already see the logged-in state."""
        seen = []

        class StateChecker(ChatListener):
            def on_login_result(inner_self, success, error_message):
                seen.append(self.connection.is_logged_in())

        self.registry.add_listener(StateChecker())
        self.assertTrue(self.reader.handle_line("loginok"))

        self.assertEqual(seen, [True])
        self.assertEqual(self.listener.named('on_login_result'), [(True, None)])

    def test_login_error(self):
        """Test that loginerr reports failure and keeps the state."""
        self.reader.handle_line("loginerr")
        self.reader.handle_line("loginerr username already in use")

        self.assertEqual(self.listener.named('on_login_result'), [
            (False, "Login error"),
            (False, "username already in use"),
        ])
        self.assertFalse(self.connection.is_logged_in())

    def test_user_list(self):
        """Test that users dispatches the ordered user list."""
        self.reader.handle_line("users alice bob carol")
        self.assertEqual(self.listener.named('on_user_list'), [(["alice", "bob", "carol"],)])

    def test_user_list_without_payload_is_skipped(self):
        """Test that an empty users line produces no event and no error."""
        self.assertFalse(self.reader.handle_line("users"))
        self.assertFalse(self.reader.handle_line("users "))

        self.assertEqual(self.listener.calls, [])
        self.assertEqual(self.reader.get_stats()['malformed_lines'], 2)

    def test_private_message(self):
        """Test that privmsg keeps the whitespace inside the body."""
        self.reader.handle_line("privmsg alice hello there")
        self.assertEqual(
            self.listener.named('on_message_received'),
            [(TextMessage("alice", True, "hello there"),)]
        )

    def test_public_message(self):
        """Test that msg produces a public message."""
        self.reader.handle_line("msg bob  spaced   out  ")
        message = self.listener.named('on_message_received')[0][0]
        self.assertEqual(message.sender, "bob")
        self.assertFalse(message.private)
        self.assertEqual(message.text, "spaced   out  ")

    def test_public_message_without_body_is_skipped(self):
        """Test that a message with a sender but no body produces no event."""
        for line in ("msg", "msg ", "msg alice", "msg alice "):
            self.assertFalse(self.reader.handle_line(line))
        self.assertEqual(self.listener.calls, [])

    def test_message_ok_has_no_event(self):
        """Test that msgok is acknowledged silently."""
        self.assertTrue(self.reader.handle_line("msgok"))
        self.assertEqual(self.listener.calls, [])

    def test_message_and_command_errors(self):
        """Test that msgerr and cmderr carry their description."""
        self.reader.handle_line("msgerr incorrect recipient")
        self.reader.handle_line("cmderr command not supported")

        self.assertEqual(self.listener.named('on_message_error'), [("incorrect recipient",)])
        self.assertEqual(self.listener.named('on_command_error'), [("command not supported",)])

    def test_errors_without_description_are_skipped(self):
        self.reader.handle_line("msgerr")
        self.reader.handle_line("cmderr")
        self.assertEqual(self.listener.calls, [])

    def test_supported_commands(self):
        self.reader.handle_line("supported login msg privmsg users help")
        self.assertEqual(
            self.listener.named('on_supported_commands'),
            [(["login", "msg", "privmsg", "users", "help"],)]
        )

    def test_unknown_command_is_ignored(self):
        """Test that an unknown command produces no event."""
        self.assertFalse(self.reader.handle_line("foobar x y"))
        self.assertFalse(self.reader.handle_line(""))

        self.assertEqual(self.listener.calls, [])
        stats = self.reader.get_stats()
        self.assertEqual(stats['unknown_commands'], 2)
        self.assertEqual(stats['malformed_lines'], 0)

    def test_command_words_are_case_sensitive(self):
        self.assertFalse(self.reader.handle_line("LOGINOK"))
        self.assertFalse(self.connection.is_logged_in())

    def test_failing_listener_does_not_stop_dispatch(self):
        """Test that a listener exception reaches neither the loop nor other listeners."""

        class Broken(ChatListener):
            def on_user_list(self, users):
                raise RuntimeError("boom")

        registry = ListenerRegistry()
        registry.add_listener(Broken())
        recorder = RecordingListener()
        registry.add_listener(recorder)
        reader = ProtocolReader(self.connection, registry)

        self.assertTrue(reader.handle_line("users alice"))
        self.assertEqual(recorder.named('on_user_list'), [(["alice"],)])
        self.assertEqual(reader.get_stats()['listener_errors'], 1)


class TestProtocolReaderLoop(unittest.TestCase):
    """Test the background read loop."""

    def test_loop_processes_lines_in_order_and_survives_bad_input(self):
        """Test that malformed and unknown lines do not end the loop."""
        connection = ScriptedConnection([
            "users",
            "foobar x y",
            "",
            "msg alice",
            "loginok",
            "users alice bob",
            "privmsg bob hi there",
        ])
        registry = ListenerRegistry()
        listener = RecordingListener()
        registry.add_listener(listener)

        reader = ProtocolReader(connection, registry)
        reader.start()
        self.assertTrue(reader.join(timeout=2.0))

        self.assertEqual([name for name, _ in listener.calls], [
            'on_login_result',
            'on_user_list',
            'on_message_received',
        ])
        stats = reader.get_stats()
        self.assertEqual(stats['lines_read'], 7)
        self.assertEqual(stats['malformed_lines'], 2)
        self.assertEqual(stats['unknown_commands'], 2)
        self.assertEqual(stats['events_dispatched'], 3)

    def test_loop_exits_when_read_fails(self):
        """Test that a failed read ends the loop."""
        connection = ScriptedConnection([])
        reader = ProtocolReader(connection, ListenerRegistry())
        reader.start()

        self.assertTrue(reader.join(timeout=2.0))
        self.assertFalse(reader.is_running())
        self.assertEqual(connection.disconnects, 1)

    def test_loop_does_not_start_when_disconnected(self):
        connection = ScriptedConnection(["loginok"])
        connection.connected = False
        reader = ProtocolReader(connection, ListenerRegistry())
        reader.start()

        self.assertTrue(reader.join(timeout=2.0))
        self.assertEqual(reader.get_stats()['lines_read'], 0)

    def test_loop_leaves_a_newer_connection_alone(self):
        """Test that a reader stops once the connection was replaced."""

        class Reconnecting(ScriptedConnection):
            def read_line(self, generation=None):
                line = super().read_line(generation)
                # A disconnect and reconnect happen right after the first line
                self.generation = 2
                return line

        connection = Reconnecting(["loginok", "users alice"])
        reader = ProtocolReader(connection, ListenerRegistry())
        reader.start()

        self.assertTrue(reader.join(timeout=2.0))
        self.assertEqual(reader.generation, 1)
        self.assertFalse(reader.serves_current_connection())
        self.assertEqual(reader.get_stats()['lines_read'], 1)
        self.assertEqual(connection.lines, ["users alice"])
        self.assertTrue(connection.is_connected())


if __name__ == '__main__':
    unittest.main()
