"""Health, stats and connectivity endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter

from zivy.infra.tokens import CHARS_PER_TOKEN

from .cors import describe_cors
from .deps import RelayContextDep
from .models import (
    ConfigEcho,
    ConnectivityResponse,
    HealthResponse,
    ReadinessFlags,
    StatsResponse,
)

router = APIRouter(tags=["status"])


@router.get("/health")
async def health(context: RelayContextDep) -> HealthResponse:
    ready = ReadinessFlags(
        knowledge_loaded=context.knowledge.loaded,
        vendor_configured=context.vendor_configured,
        relay_ready=context.relay.ready,
    )
    return HealthResponse(
        status="ok" if ready.relay_ready else "degraded",
        provider=context.provider,
        model=context.relay.model_name,
        ready=ready,
        metrics=context.usage.snapshot(),
    )


@router.get("/stats")
async def stats(context: RelayContextDep) -> StatsResponse:
    config = context.config
    model_name = context.relay.model_name
    price = context.costs.price_for(model_name)
    return StatsResponse(
        metrics=context.usage.snapshot(),
        average_cost_per_request=round(context.usage.average_cost(), 8),
        pricing={
            "model": model_name,
            "input_per_million": price.input_per_million,
            "output_per_million": price.output_per_million,
            "chars_per_token_estimate": CHARS_PER_TOKEN,
        },
        config=ConfigEcho(
            provider=context.provider,
            active_model=model_name,
            allowed_models=config.llm.allowed_models,
            knowledge_length=context.knowledge.length,
            knowledge_source=context.knowledge.source,
            domain_keywords=context.prompts.keywords,
            sessions=len(context.sessions),
            session_capacity=context.sessions.capacity,
            cors=describe_cors(config.cors),
        ),
        notes=config.pricing.notes,
    )


@router.get("/test")
async def connectivity(context: RelayContextDep) -> ConnectivityResponse:
    name = context.config.prompt.assistant_name
    return ConnectivityResponse(
        status="ok",
        message=f"{name} backend is reachable.",
        provider=context.provider,
        model=context.relay.model_name,
        timestamp=datetime.now(timezone.utc),
    )
