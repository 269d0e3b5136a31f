"""Logging and tracing setup for the admin console.

Modules log under the ``resale_admin`` package logger. Entity store requests
(``resale_admin.store``) can be turned up on their own with
``store_log_level``; request chatter from ``httpx``/``httpcore`` is kept at its
own, quieter level.
"""

from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from resale_admin import __version__
from resale_admin.core.config import Settings

PACKAGE_LOGGER = "resale_admin"
STORE_LOGGER = "resale_admin.store"
HTTP_LOGGERS = ("httpx", "httpcore")

# Streamlit re-runs the script on every interaction; the provider is installed once.
_TRACER_INITIALISED = False


def _level(name: str | None, default: int) -> int:
    if not name:
        return default
    return getattr(logging, name.upper(), default)


def _parse_headers(header_string: str | None) -> dict[str, str]:
    """``"api-key=abc,x=1"`` as sent in ``OTEL_EXPORTER_OTLP_HEADERS``."""

    headers: dict[str, str] = {}
    for item in (header_string or "").split(","):
        key, sep, value = item.partition("=")
        if sep and key.strip():
            headers[key.strip()] = value.strip()
    return headers


def logging_config(settings: Settings) -> dict[str, Any]:
    level = _level(settings.log_level, logging.INFO)
    store_level = _level(settings.store_log_level, level)
    http_level = _level(settings.http_log_level, logging.WARNING)

    loggers: dict[str, Any] = {
        PACKAGE_LOGGER: {"level": level},
        STORE_LOGGER: {"level": store_level},
    }
    for name in HTTP_LOGGERS:
        loggers[name] = {"level": http_level}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {"format": settings.log_format},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "console",
            }
        },
        "loggers": loggers,
        "root": {"handlers": ["console"], "level": level},
    }


def configure_logging(settings: Settings) -> logging.Logger:
    """Apply :func:`logging_config` and return the application logger."""

    dictConfig(logging_config(settings))
    logger = logging.getLogger(settings.app_name)
    logger.setLevel(_level(settings.log_level, logging.INFO))
    return logger


def build_resource(settings: Settings) -> Resource:
    """Resource attached to every ``entity_store.request`` span."""

    return Resource(
        attributes={
            "service.name": settings.otel_service_name,
            "service.version": __version__,
            "deployment.environment": settings.environment,
            "entity_store.base_url": settings.api_base_url,
        }
    )


def init_tracer(settings: Settings) -> TracerProvider | None:
    """Install an OTLP tracer provider when tracing is enabled."""

    global _TRACER_INITIALISED

    if _TRACER_INITIALISED or not settings.otel_enabled:
        return None

    exporter_kwargs: dict[str, object] = {}
    if settings.otel_exporter_otlp_endpoint:
        exporter_kwargs["endpoint"] = settings.otel_exporter_otlp_endpoint
    headers = _parse_headers(settings.otel_exporter_otlp_headers)
    if headers:
        exporter_kwargs["headers"] = headers

    provider = TracerProvider(resource=build_resource(settings))
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(**exporter_kwargs)))
    trace.set_tracer_provider(provider)
    _TRACER_INITIALISED = True
    logging.getLogger(__name__).info(
        "Tracing entity store requests as %s (%s)",
        settings.otel_service_name,
        settings.environment,
    )
    return provider


def shutdown_tracer(provider: TracerProvider | None) -> None:
    if provider is None:
        return

    global _TRACER_INITIALISED
    provider.force_flush()
    provider.shutdown()
    _TRACER_INITIALISED = False
