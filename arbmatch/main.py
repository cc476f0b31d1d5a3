from __future__ import annotations

import argparse
import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import Iterable, List

from arbmatch.config import ArbitrageConfig, load_config
from arbmatch.confidence import GRADE_ORDER
from arbmatch.extractors import extract_metadata
from arbmatch.matching import match_markets, matching_stats
from arbmatch.models import Market, ValidatedMarketPair
from arbmatch.report import format_scan_result, opportunity_to_dict
from arbmatch.scanner import ScanOptions, scan_markets
from arbmatch.snapshots import group_by_platform, load_snapshot
from arbmatch.tracker import OpportunityTracker

logger = logging.getLogger(__name__)


def _metadata_payload(market: Market) -> dict:
    meta = extract_metadata(market)
    entities = meta.entities
    return {
        "platform": meta.platform,
        "market_id": meta.market_id,
        "title": meta.title,
        "category": meta.category,
        "subcategory": meta.subcategory,
        "event_date": meta.event_date.isoformat() if meta.event_date else None,
        "resolution_source": meta.resolution_source,
        "entities": {
            "people": entities.people,
            "organizations": entities.organizations,
            "locations": entities.locations,
            "events": entities.events,
            "dates": [
                {
                    "raw": item.raw,
                    "normalized": item.normalized.isoformat() if item.normalized else None,
                    "type": item.type,
                }
                for item in entities.dates
            ],
            "amounts": [
                {"raw": item.raw, "value": item.value, "unit": item.unit} for item in entities.amounts
            ],
        },
    }


def run_extract(markets: List[Market]) -> int:
    payload = [_metadata_payload(market) for market in markets]
    print(json.dumps(payload, indent=2, sort_keys=True))
    return 0


def _match_all(markets: List[Market], config: ArbitrageConfig) -> List[ValidatedMarketPair]:
    grouped = group_by_platform(markets)
    platforms = list(grouped)
    pairs: List[ValidatedMarketPair] = []
    for i, platform_a in enumerate(platforms):
        for platform_b in platforms[i + 1 :]:
            pairs.extend(match_markets(grouped[platform_a], grouped[platform_b], config))
    return pairs


def run_match(markets: List[Market], config: ArbitrageConfig, as_json: bool) -> int:
    pairs = _match_all(markets, config)
    if as_json:
        payload = {
            "stats": matching_stats(pairs),
            "pairs": [
                {
                    "a": f"{pair.market_a.platform}:{pair.market_a.market_id}",
                    "b": f"{pair.market_b.platform}:{pair.market_b.market_id}",
                    "overall_score": pair.equivalence.overall_score,
                    "title_similarity": pair.equivalence.title_similarity,
                    "entity_overlap": pair.equivalence.entity_overlap,
                    "inverted": pair.outcome_mapping.is_inverted,
                    "warnings": pair.equivalence.warnings,
                }
                for pair in pairs
            ],
        }
        print(json.dumps(payload, indent=2, sort_keys=True))
        return 0

    if not pairs:
        print("No equivalent markets found.")
        return 0
    for pair in pairs:
        inverted = " (inverted)" if pair.outcome_mapping.is_inverted else ""
        print(
            f"{pair.equivalence.overall_score * 100:5.1f}%  "
            f"{pair.market_a.platform}:{pair.market_a.market_id} <-> "
            f"{pair.market_b.platform}:{pair.market_b.market_id}{inverted}"
        )
        print(f"        {pair.market_a.text}")
        print(f"        {pair.market_b.text}")
    return 0


def run_scan(markets: List[Market], config: ArbitrageConfig, args: argparse.Namespace) -> int:
    options = ScanOptions(
        platforms=args.platforms,
        query=args.query,
        max_opportunities=args.max_opportunities,
        min_confidence_grade=args.min_grade,
        config=config,
    )
    result = scan_markets(group_by_platform(markets), options)
    if args.json:
        payload = {
            "total_markets": result.total_markets,
            "pairs_validated": result.pairs_validated,
            "filtered_count": result.filtered_count,
            "warnings": result.warnings,
            "opportunities": [opportunity_to_dict(opp) for opp in result.opportunities],
        }
        print(json.dumps(payload, indent=2, sort_keys=True))
    else:
        print(format_scan_result(result))
    return 0


def run_watch(
    snapshots: List[List[Market]],
    paths: List[str],
    config: ArbitrageConfig,
    args: argparse.Namespace,
) -> int:
    tracker = OpportunityTracker(
        dedupe_seconds=args.dedupe_seconds,
        margin_step_resend=args.margin_step,
    )
    options = ScanOptions(
        platforms=args.platforms,
        query=args.query,
        min_confidence_grade=args.min_grade,
        config=config,
    )
    for path, markets in zip(paths, snapshots):
        result = scan_markets(group_by_platform(markets), options)
        alerts = tracker.observe(result.opportunities, result.timestamp)
        print(f"{path}: {len(result.opportunities)} opportunities, {len(alerts)} alerts")
        for tracked in alerts:
            print(
                f"  ALERT {tracked.key} net {tracked.current_profit_pct * 100:.1f}% "
                f"(peak {tracked.peak_profit_pct * 100:.1f}%)"
            )
    for tracked in tracker.history():
        print(f"  CLOSED {tracked.key} (peak {tracked.peak_profit_pct * 100:.1f}%)")
    print(
        f"Scans: {tracker.scan_count} | Active: {len(tracker.active())} | "
        f"Closed: {len(tracker.history())} | Alerts sent: {tracker.alerts_sent}"
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="arbmatch")
    parser.add_argument("--verbose", action="store_true", help="Log per-pair scoring detail")
    sub = parser.add_subparsers(dest="command", required=True)

    extract_cmd = sub.add_parser("extract", help="Print extracted metadata for each market")
    extract_cmd.add_argument("--markets", required=True, help="YAML or JSON market snapshot")

    match_cmd = sub.add_parser("match", help="List equivalent markets across platforms")
    match_cmd.add_argument("--markets", required=True, help="YAML or JSON market snapshot")
    match_cmd.add_argument("--min-score", type=float, help="Override minimum equivalence score")
    match_cmd.add_argument("--json", action="store_true", help="Emit JSON")

    scan_cmd = sub.add_parser("scan", help="Match markets and rank arbitrage opportunities")
    scan_cmd.add_argument("--markets", required=True, help="YAML or JSON market snapshot")
    scan_cmd.add_argument("--platforms", nargs="+", help="Only scan these platforms")
    scan_cmd.add_argument("--query", help="Only scan markets whose title contains this text")
    scan_cmd.add_argument("--min-grade", choices=GRADE_ORDER, default="C", help="Lowest confidence grade")
    scan_cmd.add_argument("--max-opportunities", type=int, default=10, help="Max opportunities")
    scan_cmd.add_argument("--min-score", type=float, help="Override minimum equivalence score")
    scan_cmd.add_argument("--json", action="store_true", help="Emit JSON")

    watch_cmd = sub.add_parser("watch", help="Scan snapshots in order and alert on new or widening spreads")
    watch_cmd.add_argument("--markets", required=True, nargs="+", help="Snapshot files, oldest first")
    watch_cmd.add_argument("--platforms", nargs="+", help="Only scan these platforms")
    watch_cmd.add_argument("--query", help="Only scan markets whose title contains this text")
    watch_cmd.add_argument("--min-grade", choices=GRADE_ORDER, default="C", help="Lowest confidence grade")
    watch_cmd.add_argument("--min-score", type=float, help="Override minimum equivalence score")
    watch_cmd.add_argument("--dedupe-seconds", type=int, default=300, help="Seconds before re-alerting")
    watch_cmd.add_argument("--margin-step", type=float, default=0.01, help="Margin gain that re-alerts")

    return parser


def main(argv: Iterable[str] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    paths = args.markets if isinstance(args.markets, list) else [args.markets]
    try:
        config = load_config()
        snapshots = [load_snapshot(str(Path(path).resolve())) for path in paths]
    except (OSError, ValueError) as exc:
        logger.error("%s", exc)
        return 1

    if getattr(args, "min_score", None) is not None:
        config = replace(config, min_equivalence_score=args.min_score)

    for path, loaded in zip(paths, snapshots):
        logger.info("Loaded %d markets from %s", len(loaded), path)
    markets = snapshots[0]

    if args.command == "extract":
        return run_extract(markets)
    if args.command == "match":
        return run_match(markets, config, args.json)
    if args.command == "scan":
        return run_scan(markets, config, args)
    if args.command == "watch":
        return run_watch(snapshots, paths, config, args)

    parser.error(f"Unknown command {args.command}")
    return 2
