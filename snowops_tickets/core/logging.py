"""Logging and tracing for ticket operations.

Ticket services wrap state-changing work in :func:`ticket_span`. The span
carries the ticket id, the caller's role and the status change as
attributes, and the same fields are appended to every log line emitted
inside it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from logging.config import dictConfig
from uuid import UUID

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from snowops_tickets.core.config import Settings

TRACER_NAME = "snowops_tickets"

_log_context: ContextVar[dict[str, str]] = ContextVar("ticket_log_context", default={})
_provider: TracerProvider | None = None


class TicketContextFilter(logging.Filter):
    """Expose the active ticket span fields as ``%(ticket_context)s``."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = _log_context.get()
        record.ticket_context = " ".join(f"{key}={value}" for key, value in context.items())
        return True


def parse_otlp_headers(raw: str | None) -> dict[str, str]:
    """Parse ``key=value,key=value`` as used by OTEL_EXPORTER_OTLP_HEADERS."""

    pairs = (item.partition("=") for item in (raw or "").split(","))
    return {key.strip(): value.strip() for key, sep, value in pairs if sep and key.strip()}


def configure_logging(settings: Settings) -> logging.Logger:
    """Install the stream handler and return the service logger."""

    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {"ticket_context": {"()": TicketContextFilter}},
            "formatters": {"default": {"format": settings.log_format}},
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "filters": ["ticket_context"],
                    "level": level,
                }
            },
            "loggers": {
                TRACER_NAME: {"level": level},
                "sqlalchemy.engine": {"level": logging.INFO if settings.db_echo else logging.WARNING},
            },
            "root": {"handlers": ["default"], "level": level},
        }
    )

    logger = logging.getLogger(settings.service_name)
    logger.setLevel(level)
    return logger


def init_tracer(settings: Settings) -> TracerProvider | None:
    """Register an OTLP/HTTP tracer provider when tracing is enabled."""

    global _provider

    if _provider is not None or not settings.otel_enabled:
        return None

    exporter = OTLPSpanExporter(
        endpoint=settings.otel_exporter_otlp_endpoint or None,
        headers=parse_otlp_headers(settings.otel_exporter_otlp_headers) or None,
    )
    provider = TracerProvider(
        resource=Resource(
            attributes={
                "service.name": settings.otel_service_name,
                "deployment.environment": settings.environment,
            }
        )
    )
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)
    _provider = provider
    return provider


def shutdown_tracer(provider: TracerProvider | None) -> None:
    """Flush and stop the provider returned by :func:`init_tracer`."""

    global _provider

    if provider is None:
        return
    provider.shutdown()
    if provider is _provider:
        _provider = None


def _tracer() -> trace.Tracer:
    return trace.get_tracer(TRACER_NAME)


@contextmanager
def ticket_span(operation: str, **fields: UUID | str | None) -> Iterator[trace.Span]:
    """Open a ``tickets.<operation>`` span and tag logs emitted inside it.

    ``None`` fields are dropped. Exceptions propagate; the span records them
    and ends with an error status.
    """

    attributes = {f"ticket.{key}": str(value) for key, value in fields.items() if value is not None}
    context = {**_log_context.get(), **{key: str(value) for key, value in fields.items() if value is not None}}
    token = _log_context.set(context)
    try:
        with _tracer().start_as_current_span(f"tickets.{operation}", attributes=attributes) as span:
            yield span
    finally:
        _log_context.reset(token)
