import io
import json
import os
import tempfile
import textwrap
import unittest
from contextlib import redirect_stdout
from unittest import mock

from arbmatch.main import main

SNAPSHOT = """
markets:
  - platform: polymarket
    market_id: poly-1
    title: Will Trump win the 2028 presidential election?
    yes_price: 0.39
    volume: 200000
    liquidity: 20000
    orderbook: {yes_bid: 0.38, yes_ask: 0.40}
  - platform: manifold
    market_id: mani-1
    title: Will Trump win the 2028 presidential election?
    yes_price: 0.66
    volume: 200000
    liquidity: 20000
    orderbook: {yes_bid: 0.65, yes_ask: 0.67}
"""


@mock.patch("arbmatch.config.load_dotenv")
class CliTests(unittest.TestCase):
    def setUp(self):
        handle = tempfile.NamedTemporaryFile("w", suffix=".yaml", delete=False, encoding="utf-8")
        with handle:
            handle.write(textwrap.dedent(SNAPSHOT))
        self.addCleanup(os.unlink, handle.name)
        self.path = handle.name

        env = mock.patch.dict(os.environ, {}, clear=True)
        env.start()
        self.addCleanup(env.stop)

    def _run(self, *argv):
        out = io.StringIO()
        with redirect_stdout(out):
            code = main(list(argv))
        return code, out.getvalue()

    def test_extract(self, _load_dotenv):
        code, out = self._run("extract", "--markets", self.path)
        self.assertEqual(code, 0)
        payload = json.loads(out)
        self.assertEqual([item["market_id"] for item in payload], ["poly-1", "mani-1"])
        self.assertEqual(payload[0]["category"], "politics")

    def test_match_json(self, _load_dotenv):
        code, out = self._run("match", "--markets", self.path, "--json")
        self.assertEqual(code, 0)
        payload = json.loads(out)
        self.assertEqual(payload["stats"]["total"], 1)
        self.assertEqual(payload["pairs"][0]["a"], "polymarket:poly-1")
        self.assertEqual(payload["pairs"][0]["b"], "manifold:mani-1")

    def test_scan_json(self, _load_dotenv):
        code, out = self._run("scan", "--markets", self.path, "--json")
        self.assertEqual(code, 0)
        payload = json.loads(out)
        self.assertEqual(payload["pairs_validated"], 1)
        self.assertEqual(len(payload["opportunities"]), 1)
        self.assertEqual(payload["opportunities"][0]["confidence"]["grade"], "B")

    def test_scan_text_with_grade_filter(self, _load_dotenv):
        code, out = self._run("scan", "--markets", self.path, "--min-grade", "A")
        self.assertEqual(code, 0)
        self.assertIn("No profitable arbitrage found.", out)
        self.assertIn("(1 low-confidence opportunities filtered)", out)

    def test_missing_file(self, _load_dotenv):
        code, out = self._run("scan", "--markets", self.path + ".missing")
        self.assertEqual(code, 1)
        self.assertEqual(out, "")

    def test_malformed_file(self, _load_dotenv):
        with open(self.path, "w", encoding="utf-8") as handle:
            handle.write("markets: [ {platform: kalshi, title: 'x'\n")
        code, out = self._run("scan", "--markets", self.path)
        self.assertEqual(code, 1)
        self.assertEqual(out, "")

    def test_watch_alerts_once_and_closes(self, _load_dotenv):
        handle = tempfile.NamedTemporaryFile("w", suffix=".yaml", delete=False, encoding="utf-8")
        with handle:
            handle.write("markets: []\n")
        self.addCleanup(os.unlink, handle.name)

        code, out = self._run("watch", "--markets", self.path, self.path, handle.name)
        self.assertEqual(code, 0)
        lines = out.splitlines()
        key = "polymarket:poly-1|manifold:mani-1"
        self.assertEqual(lines[0], f"{self.path}: 1 opportunities, 1 alerts")
        self.assertEqual(lines[1], f"  ALERT {key} net 28.2% (peak 28.2%)")
        self.assertEqual(lines[2], f"{self.path}: 1 opportunities, 0 alerts")
        self.assertEqual(lines[3], f"{handle.name}: 0 opportunities, 0 alerts")
        self.assertEqual(lines[4], f"  CLOSED {key} (peak 28.2%)")
        self.assertEqual(lines[5], "Scans: 3 | Active: 0 | Closed: 1 | Alerts sent: 1")

    def test_min_score_override(self, _load_dotenv):
        code, out = self._run("match", "--markets", self.path, "--min-score", "0.95")
        self.assertEqual(code, 0)
        self.assertIn("No equivalent markets found.", out)


if __name__ == "__main__":
    unittest.main()
