"""Configuration and logging setup for the stack API client."""

import logging
import pathlib
import sys
from typing import Literal

import pydantic
import structlog

from . import restapi

logger = structlog.get_logger(__name__)


class ClientConfig(pydantic.BaseModel):
    """Configuration for a StackApiClient."""

    server_url: str = pydantic.Field(description="Base URL of the server")
    api_key: str | None = pydantic.Field(
        None,
        description="API key sent as a bearer token",
    )
    api_key_file: str | None = pydantic.Field(
        None,
        description="Path to file containing the API key",
    )
    timeout: float = pydantic.Field(
        restapi.DEFAULT_TIMEOUT,
        description="Request timeout in seconds",
        gt=0,
    )
    log_level: str = pydantic.Field("INFO", description="Logging level name")
    log_format: Literal["logfmt", "json"] = pydantic.Field(
        "logfmt",
        description="Rendering of log lines written to stderr",
    )

    @pydantic.field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level_name = value.upper()
        if not isinstance(logging.getLevelName(level_name), int):
            msg = f"unknown log level: {value}"
            raise ValueError(msg)
        return level_name

    @pydantic.model_validator(mode="after")
    def _check_single_key_source(self) -> "ClientConfig":
        if (self.api_key is None) == (self.api_key_file is None):
            msg = "exactly one of api_key or api_key_file must be set"
            raise ValueError(msg)
        return self

    def resolve_api_key(self) -> str:
        """Return the API key, reading it from ``api_key_file`` if needed.

        Raises:
            FileNotFoundError: If the key file does not exist.
        """
        if self.api_key is not None:
            return self.api_key
        key_path = pathlib.Path(self.api_key_file)
        if not key_path.exists():
            msg = f"API key file not found: {self.api_key_file}"
            raise FileNotFoundError(msg)
        return key_path.read_text().strip()


def configure_logging(
    log_level_name: str,
    log_format: Literal["logfmt", "json"] = "logfmt",
) -> None:
    """Route the client's structlog events to stderr.

    Request logs are debug level, so they only appear once the level is
    lowered to DEBUG. Unknown level names fall back to INFO.
    """
    log_level = logging.getLevelName(log_level_name.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    if log_format == "json":
        renderers = [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderers = [
            structlog.processors.format_exc_info,
            structlog.processors.LogfmtRenderer(
                key_order=("timestamp", "level", "msg"),
            ),
        ]

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.EventRenamer("msg"),
            *renderers,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=sys.stderr),
    )


def load_config(config_path: str) -> ClientConfig:
    """Load and validate configuration from a JSON file."""
    path = pathlib.Path(config_path)
    if not path.exists():
        msg = f"Configuration file not found: {config_path}"
        raise FileNotFoundError(msg)
    return ClientConfig.model_validate_json(path.read_text())


def create_client(config: ClientConfig) -> restapi.StackApiClient:
    """Configure logging and construct a client from validated config."""
    configure_logging(config.log_level, config.log_format)
    client = restapi.StackApiClient(
        server_url=config.server_url,
        api_key=config.resolve_api_key(),
        timeout=config.timeout,
    )
    logger.info("Created stack API client", server_url=client.server_url)
    return client
