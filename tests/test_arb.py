import unittest
from dataclasses import replace

from arbmatch.arb import calculate_costs, calculate_cross_platform_arbitrage
from arbmatch.config import DEFAULT_CONFIG
from arbmatch.models import Side

from helpers import make_market, make_pair, spread_pair


class CrossPlatformArbTests(unittest.TestCase):
    def test_yes_a_no_b_identity(self):
        result = calculate_cross_platform_arbitrage(spread_pair())
        self.assertIsNotNone(result)
        self.assertAlmostEqual(result.gross_cost, 0.75)
        self.assertAlmostEqual(result.gross_profit, 0.25)
        self.assertEqual(result.guaranteed_payout, 1.0)
        self.assertEqual(result.total_fees, 0.0)
        self.assertAlmostEqual(result.net_profit_pct, 0.25 / 0.75)
        self.assertEqual((result.leg_a.side, result.leg_a.platform), (Side.YES, "polymarket"))
        self.assertEqual((result.leg_b.side, result.leg_b.platform), (Side.NO, "manifold"))
        self.assertAlmostEqual(result.leg_b.price, 0.35)
        self.assertEqual(result.description, "Buy YES @ polymarket + NO @ manifold")

    def test_reverse_direction(self):
        market_a = make_market("polymarket", "poly-1", bid=0.65, ask=0.67)
        market_b = make_market("manifold", "mani-1", bid=0.38, ask=0.40)
        result = calculate_cross_platform_arbitrage(make_pair(market_a, market_b))
        self.assertAlmostEqual(result.gross_cost, 0.75)
        self.assertEqual(result.leg_a.side, Side.NO)
        self.assertEqual(result.leg_b.side, Side.YES)
        self.assertEqual(result.description, "Buy YES @ manifold + NO @ polymarket")

    def test_fees_reduce_net_profit(self):
        market_a = make_market("polymarket", "poly-1", bid=0.38, ask=0.40)
        market_b = make_market("kalshi", "kal-1", bid=0.65, ask=0.67)
        pair = make_pair(market_a, market_b)
        result = calculate_cross_platform_arbitrage(pair)
        self.assertAlmostEqual(result.total_fees, 0.35 * 0.01)
        self.assertAlmostEqual(result.net_profit, 0.25 - 0.0035)
        self.assertAlmostEqual(result.net_cost, 0.75 + 0.0035)

        high_volume = replace(DEFAULT_CONFIG, trader_volume_usd=100_000)
        discounted = calculate_cross_platform_arbitrage(pair, high_volume)
        self.assertAlmostEqual(discounted.total_fees, 0.35 * 0.005)

    def test_inverted_pair_uses_opposite_book(self):
        market_a = make_market("polymarket", "poly-1", bid=0.38, ask=0.40)
        # B asks "will it NOT happen" and trades around 0.31
        market_b = make_market("manifold", "mani-1", bid=0.30, ask=0.33)
        result = calculate_cross_platform_arbitrage(make_pair(market_a, market_b, inverted=True))
        self.assertAlmostEqual(result.gross_cost, 0.73)
        self.assertEqual(result.leg_a.side, Side.YES)
        # Holding YES on the negated market is the NO side of A's event.
        self.assertEqual(result.leg_b.side, Side.YES)
        self.assertAlmostEqual(result.leg_b.price, 0.33)

    def test_no_arbitrage(self):
        market_a = make_market("polymarket", "poly-1", bid=0.50, ask=0.52)
        market_b = make_market("manifold", "mani-1", bid=0.48, ask=0.50)
        self.assertIsNone(calculate_cross_platform_arbitrage(make_pair(market_a, market_b)))

    def test_fees_can_erase_a_thin_spread(self):
        market_a = make_market("limitless", "lim-1", bid=0.49, ask=0.50)
        market_b = make_market("kalshi", "kal-1", bid=0.503, ask=0.51)
        self.assertIsNone(calculate_cross_platform_arbitrage(make_pair(market_a, market_b)))


class CostBreakdownTests(unittest.TestCase):
    def test_costs_at_position(self):
        pair = spread_pair()
        result = calculate_cross_platform_arbitrage(pair)
        costs = calculate_costs(result, pair, 100.0)
        self.assertEqual(costs.trading_fees, 0.0)
        # Both legs under $100 notional on deep books: 0.5% impact each.
        self.assertAlmostEqual(costs.slippage, 1.0)
        self.assertAlmostEqual(costs.spread_cost, 2.0)
        self.assertEqual(costs.settlement_fees, 0.0)
        self.assertAlmostEqual(costs.total_cost, 3.0)
        self.assertAlmostEqual(costs.cost_as_pct_of_capital, 0.03)


if __name__ == "__main__":
    unittest.main()
