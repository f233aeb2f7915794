"""Vendor relay contract.

Every relay turns a validated message list into a ``RelayResult``.
``send`` is the error boundary: vendor exceptions are logged with their
traceback, classified, and returned as a failed result.  They never
reach the API layer.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Sequence

from zivy.core.metrics import RELAY_LATENCY_SECONDS, VENDOR_ERRORS_TOTAL
from zivy.core.models import ChatMessage, RelayResult
from zivy.core.prompt import PromptBuilder
from zivy.infra.telemetry import (
    ATTR_RELAY_ERROR_KIND,
    ATTR_RELAY_MODEL,
    ATTR_RELAY_PROVIDER,
    SPAN_RELAY_SEND,
    tracer,
)

from .errors import classify_vendor_error

logger = logging.getLogger(__name__)


class VendorRelay(ABC):
    """Sends one conversation turn to an LLM vendor.

    Subclasses set ``provider`` and implement ``_send``.
    """

    provider: str = ""

    def __init__(self, *, prompts: PromptBuilder, model_name: str) -> None:
        self._prompts = prompts
        self._model_name = model_name
        self._ready = False

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def ready(self) -> bool:
        return self._ready

    async def setup(self) -> None:
        """Prepare vendor-side resources.  Called once from the lifespan."""
        self._ready = True

    async def reload_knowledge(self) -> None:
        """Pick up a reloaded knowledge text.

        Stateless relays read the knowledge through the prompt builder on
        every call, so there is nothing to do here.
        """

    async def aclose(self) -> None:
        """Release vendor clients."""

    def switch_model(self, model_name: str) -> str:
        """Use *model_name* for later calls and return the previous name."""
        previous = self._model_name
        self._model_name = model_name
        return previous

    async def send(
        self, messages: Sequence[ChatMessage], *, session_key: str
    ) -> RelayResult:
        start = time.monotonic()
        with tracer.start_as_current_span(SPAN_RELAY_SEND) as span:
            span.set_attribute(ATTR_RELAY_PROVIDER, self.provider)
            span.set_attribute(ATTR_RELAY_MODEL, self._model_name)
            try:
                result = await self._send(messages, session_key=session_key)
            except Exception as exc:
                kind = classify_vendor_error(exc)
                logger.exception(
                    "%s relay call failed (model=%s, kind=%s)",
                    self.provider,
                    self._model_name,
                    kind.value,
                )
                result = RelayResult.failure(
                    kind, str(exc), model_name=self._model_name
                )
            finally:
                RELAY_LATENCY_SECONDS.labels(provider=self.provider).observe(
                    time.monotonic() - start
                )

            if result.error is not None:
                span.set_attribute(ATTR_RELAY_ERROR_KIND, result.error.value)
                VENDOR_ERRORS_TOTAL.labels(
                    provider=self.provider, kind=result.error.value
                ).inc()
        return result

    @abstractmethod
    async def _send(
        self, messages: Sequence[ChatMessage], *, session_key: str
    ) -> RelayResult:
        """Issue the vendor call for the last user message in *messages*."""
        ...
