from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from arbmatch.analysis import find_arbitrage_opportunities
from arbmatch.confidence import grade_at_least
from arbmatch.config import DEFAULT_CONFIG, ArbitrageConfig
from arbmatch.matching import match_markets, matching_stats
from arbmatch.models import Market, ValidatedArbitrageOpportunity, ValidatedMarketPair

logger = logging.getLogger(__name__)

LOW_MARKET_COUNT = 20
LOW_AVG_EQUIVALENCE = 0.7


@dataclass(frozen=True)
class ScanOptions:
    platforms: Optional[List[str]] = None
    query: Optional[str] = None
    max_markets_per_platform: int = 50
    max_opportunities: int = 10
    min_confidence_grade: str = "C"
    config: ArbitrageConfig = DEFAULT_CONFIG


@dataclass(frozen=True)
class ScanResult:
    timestamp: datetime
    duration_ms: int
    markets_scanned: Dict[str, int]
    total_markets: int
    pairs_evaluated: int
    pairs_validated: int
    avg_equivalence_score: float
    opportunities: List[ValidatedArbitrageOpportunity]
    filtered_count: int
    warnings: List[str] = field(default_factory=list)


def _select_markets(markets_by_platform: Dict[str, List[Market]], options: ScanOptions) -> Dict[str, List[Market]]:
    wanted = options.platforms or list(markets_by_platform)
    query = options.query.lower() if options.query else None
    selected: Dict[str, List[Market]] = {}
    for platform in wanted:
        markets = markets_by_platform.get(platform, [])
        if query:
            markets = [market for market in markets if query in market.text.lower()]
        selected[platform] = markets[: options.max_markets_per_platform]
    return selected


def scan_markets(
    markets_by_platform: Dict[str, List[Market]],
    options: Optional[ScanOptions] = None,
) -> ScanResult:
    """Match every platform against every other and rank the resulting arbitrage."""
    options = options or ScanOptions()
    started = time.monotonic()
    timestamp = datetime.now(timezone.utc)

    selected = _select_markets(markets_by_platform, options)
    markets_scanned = {platform: len(markets) for platform, markets in selected.items()}
    total_markets = sum(markets_scanned.values())
    logger.info("Scanning %d markets across %d platforms", total_markets, len(selected))

    platforms = list(selected)
    pairs: List[ValidatedMarketPair] = []
    pairs_evaluated = 0
    for i, platform_a in enumerate(platforms):
        for platform_b in platforms[i + 1 :]:
            markets_a = selected[platform_a]
            markets_b = selected[platform_b]
            if not markets_a or not markets_b:
                continue
            pairs_evaluated += len(markets_a) * len(markets_b)
            found = match_markets(markets_a, markets_b, options.config)
            logger.info("%s vs %s: %d validated pairs", platform_a, platform_b, len(found))
            pairs.extend(found)

    avg_equivalence = matching_stats(pairs)["avg_equivalence"]

    opportunities = find_arbitrage_opportunities(pairs, options.config)
    kept = [
        opp for opp in opportunities if grade_at_least(opp.confidence.grade, options.min_confidence_grade)
    ]
    filtered_count = len(opportunities) - len(kept)

    warnings: List[str] = []
    if total_markets < LOW_MARKET_COUNT:
        warnings.append(f"Low market count ({total_markets}) - opportunities may be limited")
    if not pairs and total_markets > 0:
        warnings.append("No validated market pairs found - markets may be too different")
    if pairs and avg_equivalence < LOW_AVG_EQUIVALENCE:
        warnings.append(
            f"Low average equivalence ({avg_equivalence * 100:.0f}%) - verify matches carefully"
        )

    duration_ms = int((time.monotonic() - started) * 1000)
    logger.info(
        "Scan complete: pairs=%d opportunities=%d filtered=%d duration_ms=%d",
        len(pairs),
        len(kept),
        filtered_count,
        duration_ms,
    )
    return ScanResult(
        timestamp=timestamp,
        duration_ms=duration_ms,
        markets_scanned=markets_scanned,
        total_markets=total_markets,
        pairs_evaluated=pairs_evaluated,
        pairs_validated=len(pairs),
        avg_equivalence_score=avg_equivalence,
        opportunities=kept[: options.max_opportunities],
        filtered_count=filtered_count,
        warnings=warnings,
    )
