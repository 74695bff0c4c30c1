"""structlog setup for the gate's authentication events.

Every module logs snake_case events through ``get_logger(__name__)``.
``configure_logging()`` installs the processor chain once at startup
(``auth_lifespan`` calls it). Credentials are scrubbed before rendering:
known credential fields are masked, and any value that still carries the
``OAuth`` scheme prefix keeps the prefix with the token replaced.

Environment Variables:
    OAUTH_LOG_LEVEL: Minimum level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    OAUTH_LOG_FORMAT: ``console`` or ``json``
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING, Any, Literal

import structlog
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from collections.abc import MutableMapping

CREDENTIAL_FIELDS: frozenset[str] = frozenset(
    {
        "authorization",
        "credential",
        "token",
        "swt_signing_key",
        "jwt_secret",
    }
)

CREDENTIAL_SCHEME_PREFIX = "OAuth "

REDACTED = "[redacted]"


class LogSettings(BaseSettings):
    """Log output settings, read from ``OAUTH_LOG_*`` variables."""

    model_config = SettingsConfigDict(
        env_prefix="OAUTH_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Minimum level emitted",
    )
    format: Literal["console", "json"] = Field(
        default="console",
        description="Renderer for log lines",
    )

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @field_validator("format", mode="before")
    @classmethod
    def normalize_format(cls, v: Any) -> Any:
        return v.lower() if isinstance(v, str) else v


def redact_credentials(
    logger: Any,
    method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Mask credential fields and ``OAuth``-scheme values in an event."""
    for key, value in list(event_dict.items()):
        if key.lower() in CREDENTIAL_FIELDS:
            event_dict[key] = REDACTED
        elif isinstance(value, str) and value.startswith(CREDENTIAL_SCHEME_PREFIX):
            event_dict[key] = CREDENTIAL_SCHEME_PREFIX + REDACTED
    return event_dict


@lru_cache(maxsize=1)
def get_log_settings() -> LogSettings:
    return LogSettings()


def configure_logging(settings: LogSettings | None = None) -> None:
    """Install the structlog processor chain.

    Args:
        settings: Output settings. Defaults to ``get_log_settings()``.
    """
    if settings is None:
        settings = get_log_settings()

    renderer: structlog.typing.Processor
    if settings.format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            redact_credentials,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelNamesMapping()[settings.level]
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.typing.WrappedLogger:
    """Return a lazy structlog proxy, bound to ``name`` when given."""
    if name is not None:
        return structlog.get_logger().bind(logger=name)
    return structlog.get_logger()
