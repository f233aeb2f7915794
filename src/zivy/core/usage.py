"""Process-lifetime usage counters and the cost estimate."""

from __future__ import annotations

import time
from datetime import datetime, timezone

from pydantic import BaseModel, Field

from zivy.configs.system import ModelPrice, PricingConfig
from zivy.infra.tokens import estimate_tokens_from_chars

TOKENS_PER_PRICE_UNIT = 1_000_000


class CostEstimator:
    """Converts character counts to a USD estimate for a model."""

    def __init__(self, pricing: PricingConfig) -> None:
        self._pricing = pricing

    def price_for(self, model_name: str) -> ModelPrice:
        return self._pricing.models.get(model_name, self._pricing.default)

    def estimate_chars(
        self, model_name: str, input_chars: int, output_chars: int
    ) -> float:
        price = self.price_for(model_name)
        in_tokens = estimate_tokens_from_chars(input_chars)
        out_tokens = estimate_tokens_from_chars(output_chars)
        return (
            in_tokens * price.input_per_million
            + out_tokens * price.output_per_million
        ) / TOKENS_PER_PRICE_UNIT


class UsageSnapshot(BaseModel):
    total_requests: int = Field(description="Accepted /chat requests")
    estimated_total_cost: float = Field(description="Estimated USD spent")
    started_at: datetime
    uptime_seconds: float


class UsageMetrics:
    """Request count and cumulative cost estimate.

    Both values only grow until the process restarts.  Updates are plain
    attribute writes on the event loop thread, no lock is taken.
    """

    def __init__(self) -> None:
        self.total_requests = 0
        self.estimated_total_cost = 0.0
        self._started_at = datetime.now(timezone.utc)
        self._started_monotonic = time.monotonic()

    def record_request(self) -> None:
        self.total_requests += 1

    def add_cost(self, cost: float) -> None:
        if cost > 0:
            self.estimated_total_cost += cost

    def average_cost(self) -> float:
        if not self.total_requests:
            return 0.0
        return self.estimated_total_cost / self.total_requests

    def snapshot(self) -> UsageSnapshot:
        return UsageSnapshot(
            total_requests=self.total_requests,
            estimated_total_cost=round(self.estimated_total_cost, 6),
            started_at=self._started_at,
            uptime_seconds=round(time.monotonic() - self._started_monotonic, 3),
        )
