import os
import tempfile
import textwrap
import unittest
from datetime import datetime, timezone

from arbmatch.snapshots import group_by_platform, load_snapshot


class SnapshotTests(unittest.TestCase):
    def _write(self, content: str) -> str:
        handle = tempfile.NamedTemporaryFile("w", suffix=".yaml", delete=False, encoding="utf-8")
        with handle:
            handle.write(textwrap.dedent(content))
        self.addCleanup(os.unlink, handle.name)
        return handle.name

    def test_load_valid_snapshot(self):
        path = self._write(
            """
            markets:
              - platform: Polymarket
                market_id: poly-1
                title: Will Trump win the 2028 presidential election?
                yes_price: 0.39
                volume: 200000
                liquidity: 20000
                end_date: "2028-11-07T00:00:00Z"
                orderbook:
                  yes_bid: 0.38
                  yes_ask: 0.40
                url: https://polymarket.com/event/poly-1
              - platform: manifold
                id: mani-1
                question: Will Trump win the 2028 presidential election?
                yes_price: 0.66
                end_date: 2028-11-07
            """
        )
        markets = load_snapshot(path)
        self.assertEqual(len(markets), 2)
        poly, mani = markets
        self.assertEqual(poly.platform, "polymarket")
        self.assertEqual(poly.orderbook.yes_ask, 0.40)
        self.assertEqual(poly.end_date, datetime(2028, 11, 7, tzinfo=timezone.utc))
        self.assertEqual(mani.market_id, "mani-1")
        self.assertEqual(mani.text, "Will Trump win the 2028 presidential election?")
        self.assertEqual(mani.volume, 0.0)
        self.assertIsNone(mani.liquidity)
        self.assertEqual(mani.end_date, datetime(2028, 11, 7, tzinfo=timezone.utc))
        self.assertEqual(list(group_by_platform(markets)), ["polymarket", "manifold"])

    def test_requires_markets_list(self):
        path = self._write("pairs: []\n")
        with self.assertRaises(ValueError) as ctx:
            load_snapshot(path)
        self.assertIn("top-level 'markets' list", str(ctx.exception))

    def test_malformed_yaml_is_a_value_error(self):
        path = self._write("markets: [ {platform: kalshi, title: 'x'\n")
        with self.assertRaises(ValueError) as ctx:
            load_snapshot(path)
        self.assertIn("Invalid YAML", str(ctx.exception))

    def test_rejects_out_of_range_price(self):
        path = self._write(
            """
            markets:
              - platform: kalshi
                market_id: k-1
                title: Fed cut in March?
                yes_price: 1.5
            """
        )
        with self.assertRaises(ValueError) as ctx:
            load_snapshot(path)
        self.assertIn("market 0 (kalshi:k-1)", str(ctx.exception))

    def test_rejects_crossed_orderbook(self):
        path = self._write(
            """
            markets:
              - platform: kalshi
                market_id: k-1
                title: Fed cut in March?
                yes_price: 0.5
                orderbook: {yes_bid: 0.6, yes_ask: 0.4}
            """
        )
        with self.assertRaises(ValueError):
            load_snapshot(path)

    def test_rejects_duplicates(self):
        path = self._write(
            """
            markets:
              - {platform: kalshi, market_id: k-1, title: "Fed cut in March?", yes_price: 0.5}
              - {platform: kalshi, market_id: k-1, title: "Fed cut in March?", yes_price: 0.5}
            """
        )
        with self.assertRaises(ValueError) as ctx:
            load_snapshot(path)
        self.assertIn("Duplicate market kalshi:k-1", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
