"""Exceptions raised by the stack management REST API client.

Every exception carries the operation that failed (``"<METHOD> <path>"``)
and, where there is one, chains the underlying cause.
"""

from typing import Any


class StackApiError(Exception):
    """Base class for all client errors."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"{operation}: {message}")


class SerializationError(StackApiError):
    """Raised when a request body cannot be encoded to JSON."""


class RequestConstructionError(StackApiError):
    """Raised when the method and URL do not form a valid request."""


class TransportError(StackApiError):
    """Raised on network-level failures (DNS, connect, timeout, TLS, read)."""


class DecodingError(StackApiError):
    """Raised when a success response does not match the expected schema."""


class StatusError(StackApiError):
    """Raised for a non-2xx response whose body is not a structured error.

    ``raw`` holds the body bytes exactly as received; ``body`` is the same
    body decoded as UTF-8, with undecodable bytes replaced.
    """

    def __init__(self, operation: str, status_code: int, raw: bytes):
        self.status_code = status_code
        self.raw = raw
        self.body = raw.decode("utf-8", errors="replace")
        super().__init__(
            operation,
            f"API request failed with status {status_code}: {self.body}",
        )


class APIError(StackApiError):
    """Raised for a non-2xx response carrying a structured error body.

    The server-supplied ``code``, ``message`` and ``detail`` are exposed
    unchanged.
    """

    def __init__(
        self,
        operation: str,
        status_code: int,
        code: Any = None,
        message: Any = None,
        detail: Any = None,
    ):
        self.status_code = status_code
        self.code = code
        self.message = message
        self.detail = detail
        reason = message or detail or "no error message"
        super().__init__(operation, f"API error (status {status_code}): {reason}")


class NotFoundError(APIError):
    """Raised when the server reports that the resource does not exist."""
