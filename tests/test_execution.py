import unittest
from dataclasses import replace

from arbmatch.arb import calculate_costs, calculate_cross_platform_arbitrage
from arbmatch.config import DEFAULT_CONFIG
from arbmatch.execution import ABORT_CONDITIONS, FALLBACK_STRATEGY, create_execution_plan
from arbmatch.risk import assess_risk

from helpers import make_market, make_pair, spread_pair


def _plan(pair, config=DEFAULT_CONFIG):
    result = calculate_cross_platform_arbitrage(pair, config)
    costs = calculate_costs(result, pair, config.default_position_usd, config)
    risk = assess_risk(pair, result, costs, config)
    return create_execution_plan(pair, result, risk, config)


class ExecutionPlanTests(unittest.TestCase):
    def test_thinner_leg_goes_first(self):
        market_a = make_market("polymarket", "poly-1", bid=0.38, ask=0.40, liquidity=5_000)
        market_b = make_market("manifold", "mani-1", bid=0.65, ask=0.67, liquidity=20_000)
        self.assertEqual(_plan(make_pair(market_a, market_b)).leg_order, [0, 1])
        self.assertEqual(_plan(make_pair(market_b, market_a)).leg_order, [1, 0])

    def test_sizing(self):
        plan = _plan(spread_pair())
        # Depth at 2% is capped at 2000, then by the position limit.
        self.assertEqual(plan.max_size, 1000)
        # $10 of profit at a 33% margin needs only $30.
        self.assertAlmostEqual(plan.min_size, 30.0)
        self.assertEqual(plan.recommended_size, 100)

    def test_minimum_profitable_size_wins_over_default(self):
        config = replace(DEFAULT_CONFIG, default_position_usd=10)
        plan = _plan(spread_pair(), config)
        self.assertAlmostEqual(plan.recommended_size, 30.0)

    def test_size_is_capped_by_depth(self):
        plan = _plan(spread_pair(liquidity=200))
        self.assertAlmostEqual(plan.max_size, 40)
        self.assertAlmostEqual(plan.recommended_size, 40)

    def test_fixed_controls(self):
        plan = _plan(spread_pair())
        self.assertEqual(plan.estimated_execution_time_ms, 10_000)
        self.assertEqual(plan.max_acceptable_delay_ms, DEFAULT_CONFIG.max_execution_time_ms)
        self.assertEqual(plan.max_price_deviation, 0.02)
        self.assertEqual(plan.fallback_strategy, FALLBACK_STRATEGY)
        self.assertEqual(plan.abort_conditions, list(ABORT_CONDITIONS))
        self.assertEqual(len(plan.abort_conditions), 3)


if __name__ == "__main__":
    unittest.main()
