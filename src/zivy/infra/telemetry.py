"""OpenTelemetry bootstrap: tracer provider and span names.

When ``TracingConfig.enabled`` is off this module is a no-op and ``tracer``
hands out non-recording spans, so relay code can open spans
unconditionally.

Auto-instrumentations wired here:

- **FastAPI** (inbound HTTP spans)
- **httpx** (outbound HTTP spans, covers both the OpenAI SDK and
  ``langchain-openai`` calls)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from opentelemetry import trace

from zivy.configs.system import TracingConfig

if TYPE_CHECKING:
    from opentelemetry.sdk.trace import TracerProvider

logger = logging.getLogger(__name__)

tracer = trace.get_tracer("zivy")

# ---------------------------------------------------------------------------
# Span names and attribute keys
# ---------------------------------------------------------------------------

SPAN_RELAY_SEND = "relay.send"
SPAN_ASSISTANT_POLL = "assistant.poll"
SPAN_KNOWLEDGE_UPLOAD = "assistant.knowledge_upload"

ATTR_RELAY_PROVIDER = "relay.provider"
ATTR_RELAY_MODEL = "relay.model"
ATTR_RELAY_ERROR_KIND = "relay.error_kind"
ATTR_POLL_ATTEMPTS = "assistant.poll_attempts"
ATTR_RUN_STATUS = "assistant.run_status"


def init_telemetry(
    app: object | None = None,
    settings: TracingConfig | None = None,
) -> bool:
    """Install the OTLP tracer provider and instrument FastAPI and httpx.

    Returns ``True`` when tracing was switched on.
    """
    if settings is None or not settings.enabled:
        logger.info("OpenTelemetry tracing disabled.")
        return False
    if not settings.endpoint:
        logger.warning("Tracing enabled without tracing.endpoint, leaving it off.")
        return False

    trace.set_tracer_provider(_build_tracer_provider(settings))
    _instrument(app, settings.excluded_urls)

    logger.info(
        "OpenTelemetry tracing to %s (service=%s, sample_rate=%.2f)",
        settings.endpoint,
        settings.service_name,
        settings.sample_rate,
    )
    return True


def _build_tracer_provider(settings: TracingConfig) -> TracerProvider:
    from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
        OTLPSpanExporter,
    )
    from opentelemetry.sdk.resources import SERVICE_NAME, Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor
    from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased

    provider = TracerProvider(
        resource=Resource.create({SERVICE_NAME: settings.service_name}),
        sampler=ParentBased(root=TraceIdRatioBased(settings.sample_rate)),
    )
    provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.endpoint))
    )
    return provider


def _instrument(app: object | None, excluded_urls: list[str]) -> None:
    from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor

    if app is not None:
        from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

        FastAPIInstrumentor.instrument_app(app, excluded_urls=",".join(excluded_urls))

    # Vendor SDK calls (openai, langchain-openai) all go through httpx.
    HTTPXClientInstrumentor().instrument()
