"""Request and response types for the stack management REST API.

Pydantic models representing the payloads exchanged with the server. Request
models are serialized with unset fields omitted; response models ignore
fields they do not know about.
"""

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ListParams(BaseModel):
    """Pagination and filtering options for list requests."""

    page: int = Field(1, ge=0)
    size: int = Field(100, ge=0)
    filters: dict[str, str] = Field(default_factory=dict)


class Page(BaseModel, Generic[T]):
    """A page of resources returned by a list endpoint."""

    index: int = 0
    max_size: int = 0
    total_pages: int = 0
    total: int = 0
    items: list[T] = Field(default_factory=list)


class ErrorPayload(BaseModel):
    """Structured error body returned with non-2xx responses.

    Every field is optional: any JSON object decodes, while invalid JSON,
    arrays and scalars do not.
    """

    code: Any = None
    message: Any = None
    detail: Any = None


# Stacks


class StackBody(BaseModel):
    """Payload for creating a stack."""

    name: str
    description: str | None = None
    # Component type -> component ids
    components: dict[str, list[str]] | None = None
    labels: dict[str, str] | None = None


class StackUpdate(BaseModel):
    """Payload for updating a stack."""

    name: str | None = None
    description: str | None = None
    components: dict[str, list[str]] | None = None
    labels: dict[str, str] | None = None


class StackResponse(BaseModel):
    """Stack as returned by the server."""

    id: str
    name: str
    description: str | None = None
    components: dict[str, list[str]] = Field(default_factory=dict)
    labels: dict[str, str] = Field(default_factory=dict)
    created: datetime | None = None
    updated: datetime | None = None


# Components


class ComponentBody(BaseModel):
    """Payload for registering a stack component."""

    name: str
    type: str
    flavor: str
    configuration: dict[str, Any] | None = None
    connector_id: str | None = None
    connector_resource_id: str | None = None
    labels: dict[str, str] | None = None


class ComponentUpdate(BaseModel):
    """Payload for updating a stack component."""

    name: str | None = None
    configuration: dict[str, Any] | None = None
    connector_id: str | None = None
    connector_resource_id: str | None = None
    labels: dict[str, str] | None = None


class ComponentResponse(BaseModel):
    """Stack component as returned by the server."""

    id: str
    name: str
    type: str = ""
    flavor: str = ""
    configuration: dict[str, Any] = Field(default_factory=dict)
    connector_id: str | None = None
    connector_resource_id: str | None = None
    labels: dict[str, str] = Field(default_factory=dict)
    created: datetime | None = None
    updated: datetime | None = None


# Service connectors


class ServiceConnectorBody(BaseModel):
    """Payload for registering a service connector.

    ``secrets`` are write-only: the server never echoes them back.
    """

    name: str
    connector_type: str
    auth_method: str
    resource_types: list[str] | None = None
    resource_id: str | None = None
    configuration: dict[str, Any] | None = None
    secrets: dict[str, str] | None = None
    expiration_seconds: int | None = None
    labels: dict[str, str] | None = None


class ServiceConnectorUpdate(BaseModel):
    """Payload for updating a service connector."""

    name: str | None = None
    auth_method: str | None = None
    resource_types: list[str] | None = None
    resource_id: str | None = None
    configuration: dict[str, Any] | None = None
    secrets: dict[str, str] | None = None
    expiration_seconds: int | None = None
    labels: dict[str, str] | None = None


class ServiceConnectorResponse(BaseModel):
    """Service connector as returned by the server."""

    id: str
    name: str
    connector_type: str = ""
    auth_method: str = ""
    resource_types: list[str] = Field(default_factory=list)
    resource_id: str | None = None
    configuration: dict[str, Any] = Field(default_factory=dict)
    expiration_seconds: int | None = None
    expires_at: datetime | None = None
    labels: dict[str, str] = Field(default_factory=dict)
    created: datetime | None = None
    updated: datetime | None = None
