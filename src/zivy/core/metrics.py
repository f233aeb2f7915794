"""Prometheus metrics for the relay.

Business metrics that complement the auto-instrumented HTTP metrics
from ``prometheus-fastapi-instrumentator``.  All metrics use the
``zivy_`` prefix.
"""

import logging

from fastapi import FastAPI
from prometheus_client import Counter, Histogram
from prometheus_fastapi_instrumentator import Instrumentator

from zivy.configs.system import TracingConfig

logger = logging.getLogger(__name__)

CHAT_REQUESTS_TOTAL = Counter(
    "zivy_chat_requests_total",
    "Chat requests accepted by /chat, by outcome",
    ["provider", "status"],  # "ok" | "error"
)

VENDOR_ERRORS_TOTAL = Counter(
    "zivy_vendor_errors_total",
    "Vendor call failures, by classified kind",
    ["provider", "kind"],
)

RELAY_LATENCY_SECONDS = Histogram(
    "zivy_relay_latency_seconds",
    "Wall time of one vendor relay call (including run polling)",
    ["provider"],
    buckets=(0.25, 0.5, 1, 2, 5, 10, 20, 30, 45, 60),
)

ASSISTANT_POLL_ATTEMPTS = Histogram(
    "zivy_assistant_poll_attempts",
    "Run status polls needed per assistant request",
    buckets=(1, 2, 3, 5, 8, 13, 21, 30),
)

ESTIMATED_COST_TOTAL = Counter(
    "zivy_estimated_cost_total",
    "Estimated USD cost of successful replies",
    ["model_name"],
)


def setup_metrics(app: FastAPI, tracing: TracingConfig) -> None:
    """Attach HTTP instrumentation and the ``/metrics`` endpoint.

    Must run before the app starts serving, middleware cannot be added
    once the ASGI stack is built.
    """
    Instrumentator(
        excluded_handlers=tracing.excluded_urls,
    ).instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)
    logger.debug("Prometheus metrics initialised")
