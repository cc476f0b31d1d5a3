import unittest
from datetime import datetime, timezone

from arbmatch.pricing import (
    PLATFORM_FEES,
    estimate_depth,
    estimate_slippage,
    fee_rate,
    fees_for,
    get_executable_price,
)

from helpers import make_market


class FeeTests(unittest.TestCase):
    def test_unknown_platform_uses_default_schedule(self):
        self.assertEqual(fees_for("predictit"), PLATFORM_FEES["polymarket"])

    def test_volume_tiers(self):
        kalshi = fees_for("kalshi")
        self.assertEqual(fee_rate(kalshi), 0.01)
        self.assertEqual(fee_rate(kalshi, 9_999), 0.01)
        self.assertEqual(fee_rate(kalshi, 10_000), 0.007)
        self.assertEqual(fee_rate(kalshi, 250_000), 0.005)
        self.assertEqual(fee_rate(fees_for("limitless"), 1_000_000), 0.005)


class ExecutablePriceTests(unittest.TestCase):
    def test_orderbook_quotes(self):
        now = datetime(2026, 1, 1, tzinfo=timezone.utc)
        price = get_executable_price(make_market("kalshi", "k", bid=0.40, ask=0.44), now=now)
        self.assertEqual(price.bid_price, 0.40)
        self.assertEqual(price.ask_price, 0.44)
        self.assertAlmostEqual(price.mid_price, 0.42)
        self.assertAlmostEqual(price.spread, 0.04)
        self.assertEqual(price.timestamp, now)
        self.assertFalse(price.is_stale)

    def test_synthetic_quotes(self):
        price = get_executable_price(make_market("polymarket", "p", yes_price=0.5))
        self.assertAlmostEqual(price.bid_price, 0.49)
        self.assertAlmostEqual(price.ask_price, 0.51)
        self.assertEqual(price.spread, 0.02)

    def test_synthetic_quotes_are_clamped(self):
        price = get_executable_price(make_market("polymarket", "p", yes_price=0.995))
        self.assertEqual(price.ask_price, 1.0)
        low = get_executable_price(make_market("polymarket", "p", yes_price=0.0))
        self.assertEqual(low.bid_price, 0.0)

    def test_sizes(self):
        self.assertEqual(get_executable_price(make_market("polymarket", "p", volume=200_000)).ask_size, 10_000)
        self.assertEqual(get_executable_price(make_market("polymarket", "p", volume=500)).bid_size, 100)


class DepthTests(unittest.TestCase):
    def test_liquidity_defaults_to_tenth_of_volume(self):
        depth = estimate_depth(make_market("polymarket", "p", volume=20_000, liquidity=None))
        self.assertAlmostEqual(depth.volume_at_1pct, 200)
        self.assertAlmostEqual(depth.volume_at_2pct, 400)
        self.assertAlmostEqual(depth.volume_at_5pct, 800)

    def test_depth_caps(self):
        depth = estimate_depth(make_market("polymarket", "p", liquidity=1_000_000))
        self.assertEqual(
            (depth.volume_at_1pct, depth.volume_at_2pct, depth.volume_at_5pct), (1000, 2000, 5000)
        )

    def test_impact_bands(self):
        deep = estimate_depth(make_market("polymarket", "p", volume=200_000))
        self.assertEqual((deep.price_impact_100, deep.price_impact_1000, deep.price_impact_10000), (0.005, 0.01, 0.02))
        thin = estimate_depth(make_market("polymarket", "p", volume=5_000))
        self.assertEqual((thin.price_impact_100, thin.price_impact_1000, thin.price_impact_10000), (0.01, 0.02, 0.05))


class SlippageTests(unittest.TestCase):
    def test_bands_and_extrapolation(self):
        price = get_executable_price(make_market("polymarket", "p", volume=5_000))
        self.assertEqual(estimate_slippage(price, 100), 0.01)
        self.assertEqual(estimate_slippage(price, 101), 0.02)
        self.assertEqual(estimate_slippage(price, 10_000), 0.05)
        self.assertAlmostEqual(estimate_slippage(price, 20_000), 0.10)


if __name__ == "__main__":
    unittest.main()
