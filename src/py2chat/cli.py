"""
Command-Line Interface - Console chat client

This module provides a console front end for the chat client. It handles:
- Command-line argument parsing
- Loading settings from a YAML file
- Logging setup
- Reading user input and printing chat events

Usage:
    python -m py2chat --host localhost --port 1300 --username alice
    python -m py2chat --config settings.yaml
    python -m py2chat --help
"""

import sys
import argparse
import logging
from typing import List, Optional, TextIO

from py2chat.core.errors import ConfigurationError
from py2chat.core.listeners import ChatListener
from py2chat.services.configuration_service import ClientSettings, ConfigurationService
from py2chat.tcp_client import TCPClient

CONSOLE_HELP = """Commands:
  /login <username>          log in
  /users                     list connected users
  /privmsg <user> <text>     send a private message
  /help                      ask the server for its commands
  /quit                      disconnect and exit
Anything else is sent as a public message.
If the server goes away, press Enter to leave."""


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        args: List of arguments to parse. If None, uses sys.argv[1:]

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description="Console client for a line based TCP chat server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --host localhost --port 1300 --username alice
  %(prog)s --config settings.yaml
        """
    )

    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Chat server host (overrides the settings file)"
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Chat server port (overrides the settings file)"
    )

    parser.add_argument(
        "--username",
        type=str,
        default=None,
        help="Log in with this username right after connecting"
    )

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML settings file"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set logging level (default: INFO)"
    )

    return parser.parse_args(args)


def setup_logging(level: str):
    """Configure application logging.

    Args:
        level: Logging level as string (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=numeric_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def load_settings(parsed_args: argparse.Namespace) -> ClientSettings:
    """Build settings from the optional settings file and CLI overrides.

    Raises:
        ConfigurationError: If the settings file is invalid
    """
    if parsed_args.config:
        settings = ConfigurationService(parsed_args.config).load()
    else:
        settings = ClientSettings()

    if parsed_args.host is not None:
        settings.host = parsed_args.host
    if parsed_args.port is not None:
        settings.port = parsed_args.port
    if parsed_args.username is not None:
        settings.username = parsed_args.username
    if parsed_args.log_level is not None:
        settings.log_level = parsed_args.log_level
    return settings


class ConsoleListener(ChatListener):
    """Prints chat events to a text stream."""

    def __init__(self, out: Optional[TextIO] = None):
        self.out = out or sys.stdout
        # Set once the console stops reading input
        self.closing = False

    def _print(self, text: str) -> None:
        print(text, file=self.out, flush=True)

    def on_login_result(self, success, error_message):
        if success:
            self._print("* Logged in")
        else:
            self._print(f"* Login failed: {error_message}")

    def on_disconnect(self):
        if self.closing:
            self._print("* Disconnected")
        else:
            # run_console() stays blocked on stdin until the next line
            self._print("* Disconnected, press Enter to exit")

    def on_user_list(self, users):
        self._print(f"* Users: {', '.join(users)}")

    def on_message_received(self, message):
        self._print(str(message))

    def on_message_error(self, error_message):
        self._print(f"* Message not delivered: {error_message}")

    def on_command_error(self, error_message):
        self._print(f"* Command error: {error_message}")

    def on_supported_commands(self, commands):
        self._print(f"* Server commands: {' '.join(commands)}")


def handle_input(client: TCPClient, line: str, out: Optional[TextIO] = None) -> bool:
    """Act on one line of user input.

    Returns:
        False when the session should end, True otherwise
    """
    out = out or sys.stdout
    line = line.strip()
    if not line:
        return True

    command = line.split(None, 1)[0]

    if command == "/quit":
        return False

    if command == "/users":
        sent = client.refresh_user_list()
    elif command == "/help":
        sent = client.ask_supported_commands()
    elif command == "/?":
        print(CONSOLE_HELP, file=out)
        return True
    elif command == "/login":
        parts = line.split(None, 1)
        if len(parts) < 2:
            print("Usage: /login <username>", file=out)
            return True
        sent = client.try_login(parts[1])
    elif command == "/privmsg":
        parts = line.split(None, 2)
        if len(parts) < 3:
            print("Usage: /privmsg <user> <text>", file=out)
            return True
        sent = client.send_private_message(parts[1], parts[2])
    elif command.startswith("/"):
        print(f"Unknown command {command}, type /? for help", file=out)
        return True
    else:
        sent = client.send_public_message(line)

    if not sent:
        print(f"Error: {client.get_last_error()}", file=out)
    return client.is_connection_active()


def run_console(client: TCPClient, stdin: TextIO, out: Optional[TextIO] = None) -> None:
    """Feed user input to the client until /quit, EOF or disconnect."""
    for line in stdin:
        if not handle_input(client, line, out):
            break


def main(args: Optional[List[str]] = None, stdin: Optional[TextIO] = None) -> int:
    """Main entry point for the console client.

    This function:
    1. Parses command-line arguments and loads settings
    2. Sets up logging
    3. Connects, starts the reader and logs in
    4. Runs the input loop
    5. Returns exit code

    Args:
        args: Command-line arguments. If None, uses sys.argv[1:]
        stdin: Input stream. If None, uses sys.stdin

    Returns:
        Exit code (0 = success, 1 = error)
    """
    parsed_args = parse_args(args)

    try:
        settings = load_settings(parsed_args)
    except ConfigurationError as e:
        print(f"Error: {e.format_user_message()}")
        return 1

    setup_logging(settings.log_level)

    logger = logging.getLogger(__name__)
    logger.info("Starting chat client...")
    logger.debug(f"Settings: host={settings.host}, port={settings.port}")

    valid, errors = settings.to_connection_config().validate()
    if not valid:
        for error in errors:
            print(f"Error: {error}")
        return 1

    client = TCPClient()
    listener = ConsoleListener()
    client.add_listener(listener)

    if not client.connect(settings.host, settings.port):
        print(f"Error: {client.get_last_error()}")
        return 1

    try:
        client.start_listen_thread()
        if settings.username:
            client.try_login(settings.username)
        print(CONSOLE_HELP)
        run_console(client, stdin or sys.stdin)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        listener.closing = True
        client.disconnect()

    logger.info("Chat client exited")
    return 0


if __name__ == "__main__":
    sys.exit(main())
