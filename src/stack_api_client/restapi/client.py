"""Stack management REST API client.

Provides an HTTP client with bearer token authentication, thread safety,
typed CRUD and list operations, and translation of failed exchanges into
the exceptions defined in :mod:`.errors`.
"""

import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TypeVar

import httpx
import pydantic
import structlog

from .errors import (
    APIError,
    DecodingError,
    NotFoundError,
    RequestConstructionError,
    SerializationError,
    StatusError,
    TransportError,
)
from .types import (
    ComponentBody,
    ComponentResponse,
    ComponentUpdate,
    ErrorPayload,
    ListParams,
    Page,
    ServiceConnectorBody,
    ServiceConnectorResponse,
    ServiceConnectorUpdate,
    StackBody,
    StackResponse,
    StackUpdate,
)

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT = 30.0

STACKS_PATH = "/api/v1/stacks"
COMPONENTS_PATH = "/api/v1/components"
SERVICE_CONNECTORS_PATH = "/api/v1/service_connectors"

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)


def build_list_path(collection: str, params: ListParams) -> str:
    """Append pagination and filter query parameters to a collection path.

    Filter values are appended as-is, without percent-encoding; callers must
    pre-encode values containing reserved characters such as ``&`` or ``=``.
    """
    path = f"{collection}?page={params.page}&size={params.size}"
    for key, value in params.filters.items():
        path = f"{path}&{key}={value}"
    return path


class StackApiClient:
    """HTTP client for the stack management REST API.

    Holds only the server URL, the API key and transport settings; every
    operation is an independent request/response exchange. Thread-safe
    through thread-local storage of httpx.Client instances. Can be used as a
    context manager for automatic cleanup.
    """

    def __init__(
        self,
        server_url: str,
        api_key: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the REST API client.

        No network call is made here.

        Args:
            server_url: Base URL of the server (e.g., "https://stacks.example.com").
            api_key: API key sent as a bearer token with every request.
            timeout: Request timeout in seconds (default: 30.0).
            transport: Optional httpx transport shared by all threads, e.g.
                an ``httpx.MockTransport`` in tests.

        Raises:
            ValueError: If server_url is empty or timeout is not positive.
        """
        if not server_url:
            msg = "server_url cannot be empty"
            raise ValueError(msg)
        if timeout <= 0:
            msg = "timeout must be positive"
            raise ValueError(msg)

        self.server_url = server_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

        self._headers = {
            "Accept": "application/json",
            "Authorization": f"Bearer {api_key}",
        }

        # Use thread-local storage for httpx.Client (thread safety)
        self._local = threading.local()

    @property
    def client(self) -> httpx.Client:
        """Get or create the thread-local httpx client.

        Returns:
            Thread-local httpx.Client instance.
        """
        if not hasattr(self._local, "client") or self._local.client.is_closed:
            self._local.client = httpx.Client(
                headers=self._headers,
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._local.client

    def __enter__(self):
        """Enter context manager."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Exit context manager and cleanup resources."""
        self.close()

    def close(self):
        """Close the thread-local HTTP client if open."""
        if hasattr(self._local, "client") and not self._local.client.is_closed:
            self._local.client.close()

    @contextmanager
    def _request(
        self,
        method: str,
        path: str,
        body: pydantic.BaseModel | None = None,
    ) -> Iterator[httpx.Response]:
        """Send a request and yield the open response on a 2xx status.

        The target URL is the server URL with ``path`` appended verbatim. The
        response is closed when the context exits, whatever the outcome.

        Args:
            method: HTTP method.
            path: API path, optionally with a query string.
            body: Optional request body, encoded as JSON.

        Yields:
            The unread httpx.Response.

        Raises:
            SerializationError: If the body cannot be encoded.
            RequestConstructionError: If the method/URL pair is invalid.
            TransportError: If the exchange fails at the network level.
            APIError: If the server answers non-2xx with an error body.
            StatusError: If the server answers non-2xx with any other body.
        """
        operation = f"{method} {path}"
        headers = {}
        content = None
        if body is not None:
            try:
                content = body.model_dump_json(exclude_none=True)
            except (TypeError, ValueError) as exc:
                msg = f"error marshaling request body: {exc}"
                raise SerializationError(operation, msg) from exc
            headers["Content-Type"] = "application/json"

        try:
            request = self.client.build_request(
                method,
                f"{self.server_url}{path}",
                content=content,
                headers=headers,
            )
        except (httpx.InvalidURL, ValueError) as exc:
            msg = f"error creating request: {exc}"
            raise RequestConstructionError(operation, msg) from exc

        start_time = time.time()
        logger.debug("Making API request", method=method, path=path)
        try:
            response = self.client.send(request, stream=True)
        except httpx.UnsupportedProtocol as exc:
            msg = f"error creating request: {exc}"
            raise RequestConstructionError(operation, msg) from exc
        except httpx.RequestError as exc:
            logger.exception(
                "API request failed",
                method=method,
                path=path,
                duration_seconds=round(time.time() - start_time, 3),
            )
            msg = f"error making request: {exc}"
            raise TransportError(operation, msg) from exc

        try:
            logger.debug(
                "API request completed",
                status_code=response.status_code,
                duration_seconds=round(time.time() - start_time, 3),
            )
            if not response.is_success:
                self._read(response, operation)
                logger.warning(
                    "API error response",
                    method=method,
                    path=path,
                    status_code=response.status_code,
                )
                raise self._error_from_response(response, operation)
            yield response
        finally:
            response.close()

    @staticmethod
    def _read(response: httpx.Response, operation: str) -> bytes:
        try:
            return response.read()
        except httpx.RequestError as exc:
            msg = f"error reading response: {exc}"
            raise TransportError(operation, msg) from exc

    @staticmethod
    def _error_from_response(
        response: httpx.Response,
        operation: str,
    ) -> APIError | StatusError:
        """Build the exception for a non-2xx response whose body has been read."""
        try:
            payload = ErrorPayload.model_validate_json(response.content)
        except pydantic.ValidationError:
            return StatusError(operation, response.status_code, response.content)

        error_cls = (
            NotFoundError
            if response.status_code == httpx.codes.NOT_FOUND
            else APIError
        )
        return error_cls(
            operation,
            response.status_code,
            code=payload.code,
            message=payload.message,
            detail=payload.detail,
        )

    def _decode(
        self,
        response: httpx.Response,
        model: type[ModelT],
        operation: str,
    ) -> ModelT:
        content = self._read(response, operation)
        try:
            return model.model_validate_json(content)
        except pydantic.ValidationError as exc:
            msg = f"error decoding response: {exc}"
            raise DecodingError(operation, msg) from exc

    def _send(
        self,
        method: str,
        path: str,
        model: type[ModelT],
        body: pydantic.BaseModel | None = None,
    ) -> ModelT:
        with self._request(method, path, body) as response:
            return self._decode(response, model, f"{method} {path}")

    def _delete(self, path: str) -> None:
        with self._request("DELETE", path):
            pass

    # Stacks

    def create_stack(self, stack: StackBody) -> StackResponse:
        """Create a stack and return the server's representation of it."""
        return self._send("POST", STACKS_PATH, StackResponse, stack)

    def get_stack(self, stack_id: str) -> StackResponse:
        """Fetch a single stack.

        Raises:
            NotFoundError: If no stack has this id.
        """
        return self._send("GET", f"{STACKS_PATH}/{stack_id}", StackResponse)

    def update_stack(self, stack_id: str, stack: StackUpdate) -> StackResponse:
        """Update a stack; fields left unset are not sent."""
        return self._send("PUT", f"{STACKS_PATH}/{stack_id}", StackResponse, stack)

    def delete_stack(self, stack_id: str) -> None:
        """Delete a stack."""
        self._delete(f"{STACKS_PATH}/{stack_id}")

    def list_stacks(self, params: ListParams | None = None) -> Page[StackResponse]:
        """List stacks page by page.

        Args:
            params: Pagination and filters. Defaults to page 1 with 100
                items per page when omitted.

        Returns:
            Validated page of StackResponse objects.
        """
        if params is None:
            params = ListParams()
        path = build_list_path(STACKS_PATH, params)
        return self._send("GET", path, Page[StackResponse])

    # Components

    def create_component(self, component: ComponentBody) -> ComponentResponse:
        """Register a stack component."""
        return self._send("POST", COMPONENTS_PATH, ComponentResponse, component)

    def get_component(self, component_id: str) -> ComponentResponse:
        return self._send(
            "GET",
            f"{COMPONENTS_PATH}/{component_id}",
            ComponentResponse,
        )

    def update_component(
        self,
        component_id: str,
        component: ComponentUpdate,
    ) -> ComponentResponse:
        return self._send(
            "PUT",
            f"{COMPONENTS_PATH}/{component_id}",
            ComponentResponse,
            component,
        )

    def delete_component(self, component_id: str) -> None:
        self._delete(f"{COMPONENTS_PATH}/{component_id}")

    def list_stack_components(
        self,
        params: ListParams | None = None,
    ) -> Page[ComponentResponse]:
        """List stack components.

        Without ``params`` the bare collection path is requested and the
        server applies its own paging.
        """
        path = COMPONENTS_PATH
        if params is not None:
            path = build_list_path(COMPONENTS_PATH, params)
        return self._send("GET", path, Page[ComponentResponse])

    # Service connectors

    def create_service_connector(
        self,
        connector: ServiceConnectorBody,
    ) -> ServiceConnectorResponse:
        """Register a service connector. Secrets are not echoed back."""
        return self._send(
            "POST",
            SERVICE_CONNECTORS_PATH,
            ServiceConnectorResponse,
            connector,
        )

    def get_service_connector(self, connector_id: str) -> ServiceConnectorResponse:
        return self._send(
            "GET",
            f"{SERVICE_CONNECTORS_PATH}/{connector_id}",
            ServiceConnectorResponse,
        )

    def update_service_connector(
        self,
        connector_id: str,
        connector: ServiceConnectorUpdate,
    ) -> ServiceConnectorResponse:
        return self._send(
            "PUT",
            f"{SERVICE_CONNECTORS_PATH}/{connector_id}",
            ServiceConnectorResponse,
            connector,
        )

    def delete_service_connector(self, connector_id: str) -> None:
        self._delete(f"{SERVICE_CONNECTORS_PATH}/{connector_id}")

    def list_service_connectors(
        self,
        params: ListParams | None = None,
    ) -> Page[ServiceConnectorResponse]:
        """List service connectors.

        Like :meth:`list_stack_components`, no query string is sent when
        ``params`` is omitted.
        """
        path = SERVICE_CONNECTORS_PATH
        if params is not None:
            path = build_list_path(SERVICE_CONNECTORS_PATH, params)
        return self._send("GET", path, Page[ServiceConnectorResponse])
