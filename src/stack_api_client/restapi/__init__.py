"""Stack management REST API client package.

Provides a synchronous HTTP client exposing typed CRUD and list operations
for stacks, stack components and service connectors.

Exports:
    StackApiClient: HTTP client with authentication and error handling.
    ListParams: Pagination and filter options for list operations.
    types: Module containing Pydantic models for requests and responses.
    errors: Module containing the exceptions raised by the client.
    DEFAULT_TIMEOUT: Default HTTP request timeout.
"""

from . import errors, types
from .client import DEFAULT_TIMEOUT, StackApiClient
from .errors import (
    APIError,
    DecodingError,
    NotFoundError,
    RequestConstructionError,
    SerializationError,
    StackApiError,
    StatusError,
    TransportError,
)
from .types import ListParams, Page

__all__ = [
    "DEFAULT_TIMEOUT",
    "APIError",
    "DecodingError",
    "ListParams",
    "NotFoundError",
    "Page",
    "RequestConstructionError",
    "SerializationError",
    "StackApiClient",
    "StackApiError",
    "StatusError",
    "TransportError",
    "errors",
    "types",
]
