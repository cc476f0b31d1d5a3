from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from arbmatch.config import DEFAULT_CONFIG, ArbitrageConfig
from arbmatch.models import (
    ArbitrageResult,
    CostBreakdown,
    ExecutionRisk,
    Market,
    MarketRisk,
    OperationalRisk,
    RiskAssessment,
    RiskFlag,
    Severity,
    ValidatedMarketPair,
)
from arbmatch.pricing import estimate_slippage, get_executable_price
from arbmatch.tables import PLATFORM_RELIABILITY

logger = logging.getLogger(__name__)

UNKNOWN_PLATFORM_RELIABILITY = 50
# No volatility history is available offline; assume a moderate market.
ASSUMED_PRICE_VOLATILITY = 30
ASSUMED_HISTORICAL_VOLATILITY = 0.3
REGULATORY_RISK = 20
UNKNOWN_RESOLUTION_DAYS = 365.0
MAX_WARNING_FLAGS = 2


def assess_risk(
    pair: ValidatedMarketPair,
    result: ArbitrageResult,
    costs: CostBreakdown,
    config: ArbitrageConfig = DEFAULT_CONFIG,
    now: Optional[datetime] = None,
) -> RiskAssessment:
    execution = assess_execution_risk(pair, result, config)
    market = assess_market_risk(pair, now=now)
    operational = assess_operational_risk(pair)

    overall = round(0.5 * execution.score + 0.3 * market.score + 0.2 * operational.score)

    flags: List[RiskFlag] = []
    if execution.liquidity_risk > 60:
        flags.append(RiskFlag(Severity.WARNING, "LOW_LIQUIDITY", "Low liquidity may cause high slippage"))
    if market.resolution_risk > 50:
        flags.append(
            RiskFlag(
                Severity.WARNING,
                "RESOLUTION_RISK",
                "Markets may resolve differently due to differing criteria",
            )
        )
    if pair.equivalence.overall_score < 0.9:
        flags.append(
            RiskFlag(
                Severity.WARNING,
                "MATCH_UNCERTAINTY",
                f"Market equivalence {pair.equivalence.overall_score * 100:.0f}% - verify manually",
            )
        )
    if result.net_profit_pct < config.min_net_profit_pct * 2:
        flags.append(
            RiskFlag(
                Severity.INFO,
                "THIN_MARGIN",
                "Profit margin is thin - small price movements could eliminate profit",
                details=f"cost {costs.cost_as_pct_of_capital * 100:.2f}% of capital",
            )
        )

    critical = sum(1 for flag in flags if flag.severity == Severity.CRITICAL)
    warnings = sum(1 for flag in flags if flag.severity == Severity.WARNING)

    is_safe = (
        critical == 0
        and warnings <= MAX_WARNING_FLAGS
        and overall <= config.max_risk_score
        and execution.score <= config.max_execution_risk
    )
    if critical:
        reason = "Critical risk flags present"
    elif warnings > MAX_WARNING_FLAGS:
        reason = f"{warnings} warning flags exceed limit {MAX_WARNING_FLAGS}"
    elif overall > config.max_risk_score:
        reason = f"Risk score {overall} exceeds threshold {config.max_risk_score}"
    elif execution.score > config.max_execution_risk:
        reason = f"Execution risk {execution.score} exceeds threshold {config.max_execution_risk}"
    else:
        reason = "All risk checks passed"

    logger.debug(
        "Risk a=%s b=%s overall=%d execution=%d market=%d operational=%d safe=%s",
        pair.market_a.market_id,
        pair.market_b.market_id,
        overall,
        execution.score,
        market.score,
        operational.score,
        is_safe,
    )
    return RiskAssessment(
        overall_risk_score=overall,
        execution_risk=execution,
        market_risk=market,
        operational_risk=operational,
        flags=flags,
        is_safe=is_safe,
        safety_reason=reason,
    )


def assess_execution_risk(
    pair: ValidatedMarketPair,
    result: ArbitrageResult,
    config: ArbitrageConfig = DEFAULT_CONFIG,
) -> ExecutionRisk:
    market_a = pair.market_a
    market_b = pair.market_b
    price_a = get_executable_price(market_a)
    price_b = get_executable_price(market_b)

    min_liquidity = min(market_a.effective_liquidity, market_b.effective_liquidity)
    if min_liquidity < config.min_liquidity_usd:
        liquidity_risk = 80
    elif min_liquidity < config.min_liquidity_usd * 5:
        liquidity_risk = 50
    else:
        liquidity_risk = 20

    expected_slippage = estimate_slippage(
        price_a, config.default_position_usd * result.leg_a.price
    ) + estimate_slippage(price_b, config.default_position_usd * result.leg_b.price)
    if expected_slippage > 0.05:
        slippage_risk = 80
    elif expected_slippage > 0.02:
        slippage_risk = 50
    else:
        slippage_risk = 20

    # Thin volume means prices can move before the second leg fills.
    min_volume = min(market_a.volume or 0.0, market_b.volume or 0.0)
    if min_volume < 1000:
        timing_risk = 70
    elif min_volume < 10_000:
        timing_risk = 40
    else:
        timing_risk = 20

    if min_volume < 5000:
        window_ms = 60_000
    elif min_volume < 50_000:
        window_ms = 30_000
    else:
        window_ms = 10_000

    return ExecutionRisk(
        score=round((liquidity_risk + slippage_risk + timing_risk) / 3),
        liquidity_risk=liquidity_risk,
        slippage_risk=slippage_risk,
        timing_risk=timing_risk,
        max_executable_size=min(price_a.depth.volume_at_2pct, price_b.depth.volume_at_2pct),
        expected_slippage=expected_slippage,
        execution_window_ms=window_ms,
    )


def assess_market_risk(pair: ValidatedMarketPair, now: Optional[datetime] = None) -> MarketRisk:
    validations = pair.equivalence.validations
    if not validations.no_resolution_conflict:
        resolution_risk = 70
    elif not validations.same_timeframe:
        resolution_risk = 50
    else:
        resolution_risk = 20

    overlap = pair.equivalence.entity_overlap
    if overlap > 0.7:
        correlation_risk = 20
    elif overlap > 0.5:
        correlation_risk = 40
    else:
        correlation_risk = 60

    return MarketRisk(
        score=round((resolution_risk + correlation_risk + ASSUMED_PRICE_VOLATILITY) / 3),
        resolution_risk=resolution_risk,
        correlation_risk=correlation_risk,
        price_volatility=ASSUMED_PRICE_VOLATILITY,
        historical_volatility=ASSUMED_HISTORICAL_VOLATILITY,
        resolution_days=_resolution_days(pair.market_a, pair.market_b, now),
    )


def _resolution_days(market_a: Market, market_b: Market, now: Optional[datetime]) -> float:
    end = market_a.end_date or market_b.end_date
    if end is None:
        return UNKNOWN_RESOLUTION_DAYS
    if end.tzinfo is None:
        end = end.replace(tzinfo=timezone.utc)
    current = now or datetime.now(timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)
    return max(0.0, (end - current).total_seconds() / 86_400)


def assess_operational_risk(pair: ValidatedMarketPair) -> OperationalRisk:
    reliability_a = PLATFORM_RELIABILITY.get(pair.market_a.platform, UNKNOWN_PLATFORM_RELIABILITY)
    reliability_b = PLATFORM_RELIABILITY.get(pair.market_b.platform, UNKNOWN_PLATFORM_RELIABILITY)
    settlement_risk = 100 - (reliability_a + reliability_b) / 2

    return OperationalRisk(
        score=round((settlement_risk + REGULATORY_RISK) / 2),
        platform_reliability={
            pair.market_a.platform: reliability_a,
            pair.market_b.platform: reliability_b,
        },
        settlement_risk=settlement_risk,
        regulatory_risk=REGULATORY_RISK,
    )
