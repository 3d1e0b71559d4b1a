"""
Unified error handling framework for the chat client.

This module defines the error hierarchy used across the client. Errors are
never raised out of the public connection API; instead they are recorded in
the connection's last-error slot and logged.

Error Code Ranges:
- 1000-1999: Connection errors
- 2000-2999: Protocol errors
- 6000-6999: Configuration errors
- 7000-7999: Validation errors
- 9000-9999: Unknown/System errors
"""

from typing import Optional, Dict, Any
from datetime import datetime
import traceback


class ChatError(Exception):
    """
    Base exception for all chat client errors.

    Provides structured error information with context tracking.
    """

    # Base error code for unknown errors
    DEFAULT_CODE = 9000

    def __init__(
        self,
        message: str,
        error_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        """
        Initialize a chat error.

        Args:
            message: Human-readable error description
            error_code: Numeric error code for categorization
            context: Additional context information (WHERE)
            cause: Original exception if this wraps another error
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.DEFAULT_CODE
        self.context = context or {}
        self.cause = cause
        self.timestamp = datetime.now()

        # Capture stack trace
        self.stack_trace = traceback.format_exc() if cause else None

        if cause:
            self.context['original_error'] = str(cause)
            self.context['original_type'] = type(cause).__name__

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'code': self.error_code,
            'context': self.context,
            'timestamp': self.timestamp.isoformat(),
            'cause': str(self.cause) if self.cause else None,
        }

    def format_user_message(self) -> str:
        """Format error for user display (without technical details)."""
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def format_log_message(self) -> str:
        """Format error for logging (with all details)."""
        parts = [
            f"[{self.error_code}] {self.__class__.__name__}: {self.message}"
        ]

        if self.context:
            parts.append(f"Context: {self.context}")

        if self.cause:
            parts.append(f"Caused by: {self.cause}")

        return " | ".join(parts)


class ConnectionError(ChatError):
    """Errors related to the network connection and socket operations."""
    DEFAULT_CODE = 1001

    def __init__(self, message: str, **kwargs):
        if 'context' not in kwargs or kwargs['context'] is None:
            kwargs['context'] = {}
        kwargs['context']['category'] = 'CONNECTION'
        super().__init__(message, **kwargs)


class ProtocolError(ChatError):
    """Errors related to lines that do not follow the chat protocol."""
    DEFAULT_CODE = 2001

    def __init__(self, message: str, command: Optional[str] = None, **kwargs):
        if 'context' not in kwargs or kwargs['context'] is None:
            kwargs['context'] = {}
        kwargs['context']['category'] = 'PROTOCOL'
        if command is not None:
            kwargs['context']['command'] = command
        super().__init__(message, **kwargs)
        self.command = command


class MalformedLineError(ProtocolError):
    """A known command arrived without the payload it requires."""
    DEFAULT_CODE = 2002

    def __init__(self, message: str, command: Optional[str] = None,
                 line: Optional[str] = None, **kwargs):
        super().__init__(message, command=command, **kwargs)
        self.line = line
        if line is not None:
            self.context['line'] = line


class ConfigurationError(ChatError):
    """Errors related to client settings files."""
    DEFAULT_CODE = 6001

    def __init__(self, message: str, setting_name: Optional[str] = None, **kwargs):
        if 'context' not in kwargs or kwargs['context'] is None:
            kwargs['context'] = {}
        kwargs['context']['category'] = 'CONFIGURATION'
        if setting_name:
            kwargs['context']['setting'] = setting_name
        super().__init__(message, **kwargs)


class ValidationError(ChatError):
    """Errors related to input validation and parameter checking."""
    DEFAULT_CODE = 7001

    def __init__(self, message: str, field_name: Optional[str] = None, **kwargs):
        if 'context' not in kwargs or kwargs['context'] is None:
            kwargs['context'] = {}
        kwargs['context']['category'] = 'VALIDATION'
        if field_name:
            kwargs['context']['field'] = field_name
        super().__init__(message, **kwargs)


class ErrorCodes:
    """Standard error codes for common error scenarios."""

    # Connection errors (1000-1999)
    CONNECTION_REFUSED = 1001
    ALREADY_CONNECTED = 1002
    CONNECTION_LOST = 1003
    SOCKET_ERROR = 1004
    NOT_CONNECTED = 1005

    # Protocol errors (2000-2999)
    PROTOCOL_ERROR = 2001
    MISSING_PAYLOAD = 2002

    # Configuration errors (6000-6999)
    CONFIG_INVALID = 6002
    CONFIG_SAVE_ERROR = 6003

    # Validation errors (7000-7999)
    INVALID_PARAMETER = 7001
    OUT_OF_RANGE = 7002

    # System errors (9000-9999)
    UNKNOWN_ERROR = 9000


def wrap_external_error(e: Exception, message: str, error_class=ChatError, **context) -> ChatError:
    """
    Wrap an external exception in a ChatError.

    Args:
        e: The original exception
        message: Context-specific error message
        error_class: The ChatError subclass to use
        **context: Additional context information

    Returns:
        A ChatError instance wrapping the original exception
    """
    return error_class(
        message=message,
        cause=e,
        context=context
    )
