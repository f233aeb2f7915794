"""Process-wide relay state owned by a single context object.

``RelayContext`` bundles the knowledge store, prompt builder, session
registry, vendor relay and usage counters.  One instance lives on
``app.state`` for the lifetime of the app; request handlers receive it
through ``get_relay_context``.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from zivy.configs.config import AppConfig, get_app_config
from zivy.infra.lifespan import get_app

from .knowledge import KnowledgeStore
from .metrics import CHAT_REQUESTS_TOTAL, ESTIMATED_COST_TOTAL
from .models import RelayResult, VendorErrorKind
from .prompt import PromptBuilder
from .relay import VendorRelay, build_relay
from .sessions import SessionRegistry
from .usage import CostEstimator, UsageMetrics

logger = logging.getLogger(__name__)


class ModelNotAllowed(ValueError):
    """Raised when a model switch names a model outside the allow-list."""


class RelayContext:
    """Everything a chat request needs, created once per app."""

    def __init__(
        self,
        *,
        config: AppConfig,
        knowledge: KnowledgeStore,
        prompts: PromptBuilder,
        sessions: SessionRegistry,
        relay: VendorRelay,
        usage: UsageMetrics | None = None,
    ) -> None:
        self.config = config
        self.knowledge = knowledge
        self.prompts = prompts
        self.sessions = sessions
        self.relay = relay
        self.usage = usage or UsageMetrics()
        self.costs = CostEstimator(config.pricing)

    @classmethod
    def from_config(cls, config: AppConfig) -> "RelayContext":
        knowledge = KnowledgeStore(config.knowledge_path, config.knowledge.fallback)
        knowledge.load()
        prompts = PromptBuilder(config.prompt, knowledge)
        sessions = SessionRegistry(config.sessions.capacity)
        relay = build_relay(config, prompts, knowledge, sessions)
        return cls(
            config=config,
            knowledge=knowledge,
            prompts=prompts,
            sessions=sessions,
            relay=relay,
        )

    @property
    def provider(self) -> str:
        return self.config.llm.provider

    @property
    def vendor_configured(self) -> bool:
        return bool(self.config.llm.api_key)

    def fallback_message(self, kind: VendorErrorKind) -> str:
        template: str = getattr(self.config.fallbacks, kind.value)
        return template.format(
            name=self.config.prompt.assistant_name,
            contact=self.config.prompt.support_contact,
        )

    def record_result(self, result: RelayResult) -> float:
        """Update counters for a finished relay call, return its cost."""
        if not result.ok:
            CHAT_REQUESTS_TOTAL.labels(provider=self.provider, status="error").inc()
            return 0.0

        CHAT_REQUESTS_TOTAL.labels(provider=self.provider, status="ok").inc()
        cost = self.costs.estimate_chars(
            result.model_name, result.input_chars, result.output_chars
        )
        self.usage.add_cost(cost)
        ESTIMATED_COST_TOTAL.labels(model_name=result.model_name).inc(cost)
        return cost

    def switch_model(self, model_name: str) -> str:
        """Swap the active model, returning the previous one."""
        allowed = self.config.llm.allowed_models
        if model_name not in allowed:
            raise ModelNotAllowed(
                f"Model {model_name!r} is not allowed. Choose one of: "
                + ", ".join(allowed)
            )
        previous = self.relay.switch_model(model_name)
        logger.info("Switched model %s -> %s", previous, model_name)
        return previous

    async def reload_knowledge(self) -> int:
        length = self.knowledge.reload()
        await self.relay.reload_knowledge()
        logger.info(
            "Knowledge reloaded (%d chars, source=%s)", length, self.knowledge.source
        )
        return length


# ---------------------------------------------------------------------------
# Lifespan dependency
# ---------------------------------------------------------------------------


async def build_relay_context(
    app: Annotated[FastAPI, Depends(get_app)],
    config: Annotated[AppConfig, Depends(get_app_config)],
) -> AsyncGenerator[RelayContext, None]:
    """Create the ``RelayContext``, run vendor setup, log totals on exit."""
    context = RelayContext.from_config(config)
    try:
        await context.relay.setup()
    except Exception:
        # /health reports degraded. The assistant relay retries setup on the
        # next chat or knowledge reload.
        logger.exception("%s relay setup failed", context.provider)

    if not config.api.admin_token:
        logger.warning("Admin routes are unauthenticated (api.admin_token unset)")

    app.state.relay_context = context
    logger.info(
        "Zivy relay started (provider=%s, model=%s, public_url=%s)",
        context.provider,
        context.relay.model_name,
        config.server.public_base_url or "-",
    )

    yield context

    snapshot = context.usage.snapshot()
    logger.info(
        "Zivy relay shutting down: total_requests=%d estimated_total_cost=%.6f",
        snapshot.total_requests,
        snapshot.estimated_total_cost,
    )
    await context.relay.aclose()


def get_relay_context(request: Request) -> RelayContext:
    """FastAPI dependency, reads the context from ``app.state``."""
    return request.app.state.relay_context
