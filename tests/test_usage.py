"""Token estimate, cost estimate and usage counters."""

import pytest

from zivy.configs.system import ModelPrice, PricingConfig
from zivy.core.usage import CostEstimator, UsageMetrics
from zivy.infra.tokens import estimate_tokens_from_chars


class TestTokens:
    def test_rounds_up(self):
        assert estimate_tokens_from_chars(0) == 0
        assert estimate_tokens_from_chars(3) == 1
        assert estimate_tokens_from_chars(4) == 1
        assert estimate_tokens_from_chars(5) == 2
        assert estimate_tokens_from_chars(400) == 100


class TestCostEstimator:
    def test_known_model_price(self):
        costs = CostEstimator(PricingConfig())

        # 400 chars in, 200 chars out: 100 + 50 tokens at gpt-4o prices
        cost = costs.estimate_chars("gpt-4o", 400, 200)

        assert cost == pytest.approx((100 * 2.5 + 50 * 10.0) / 1_000_000)

    def test_unknown_model_uses_default(self):
        pricing = PricingConfig(
            default=ModelPrice(input_per_million=1.0, output_per_million=1.0),
            models={},
        )
        costs = CostEstimator(pricing)

        assert costs.price_for("mystery") == pricing.default
        assert costs.estimate_chars("mystery", 4, 4) == pytest.approx(2e-6)

    def test_mini_model_is_cheaper(self):
        costs = CostEstimator(PricingConfig())

        assert costs.estimate_chars("gpt-4o-mini", 4000, 4000) < costs.estimate_chars(
            "gpt-4o", 4000, 4000
        )


class TestUsageMetrics:
    def test_starts_at_zero(self):
        usage = UsageMetrics()
        snapshot = usage.snapshot()

        assert snapshot.total_requests == 0
        assert snapshot.estimated_total_cost == 0.0
        assert usage.average_cost() == 0.0

    def test_counts_and_costs_accumulate(self):
        usage = UsageMetrics()
        for _ in range(4):
            usage.record_request()
        usage.add_cost(0.002)
        usage.add_cost(0.002)

        snapshot = usage.snapshot()

        assert snapshot.total_requests == 4
        assert snapshot.estimated_total_cost == pytest.approx(0.004)
        assert usage.average_cost() == pytest.approx(0.001)

    def test_ignores_non_positive_cost(self):
        usage = UsageMetrics()
        usage.add_cost(0.0)
        usage.add_cost(-1.0)

        assert usage.estimated_total_cost == 0.0
