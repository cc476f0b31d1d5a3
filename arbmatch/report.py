from typing import List

from arbmatch.models import ValidatedArbitrageOpportunity
from arbmatch.scanner import ScanResult

RULE = "-" * 45
PROFIT_EXAMPLES_USD = (100, 500, 1000)


def _risk_level(score: int) -> str:
    if score < 30:
        return "Low"
    if score < 60:
        return "Medium"
    return "High"


def _shorten(text: str, limit: int = 45) -> str:
    return text if len(text) <= limit else text[:limit] + "..."


def format_opportunity(opp: ValidatedArbitrageOpportunity, index: int = 1) -> str:
    market_a = opp.pair.market_a
    market_b = opp.pair.market_b
    lines: List[str] = [
        f"ARB #{index} | {opp.net_profit_pct * 100:.1f}% PROFIT | Grade {opp.confidence.grade}",
        RULE,
        f'"{_shorten(market_a.title)}"',
        "",
        "PRICES:",
    ]
    for market in (market_a, market_b):
        lines.append(f"  {market.platform.upper()}: {market.yes_price * 100:.0f}c YES")
        if market.url:
            lines.append(f"    [{market.url}]")

    lines.append("")
    lines.append("EXECUTION STEPS:")
    for step, leg_index in enumerate(opp.execution.leg_order, start=1):
        leg = opp.strategy.legs[leg_index]
        lines.append(f"  Step {step}: {leg.action} {leg.side} @ {leg.platform} at {leg.target_price * 100:.0f}c")

    lines.append("")
    lines.append("PROFIT:")
    for size in PROFIT_EXAMPLES_USD:
        lines.append(f"  ${size} position -> ${size * opp.net_profit_pct:.2f} profit")

    lines.append("")
    lines.append(
        f"Recommended: ${opp.execution.recommended_size:.0f} (max: ${opp.execution.max_size:.0f})"
    )
    lines.append(
        f"Risk: {_risk_level(opp.risk.overall_risk_score)} ({opp.risk.overall_risk_score}) | "
        f"Match: {opp.pair.equivalence.overall_score * 100:.0f}% | "
        f"{'safe' if opp.risk.is_safe else 'unsafe'}: {opp.risk.safety_reason}"
    )
    for flag in opp.risk.flags:
        lines.append(f"  [{flag.severity}] {flag.code}: {flag.message}")
    lines.append(opp.confidence.recommendation)
    return "\n".join(lines)


def format_scan_result(result: ScanResult) -> str:
    platforms = " | ".join(f"{platform}: {count}" for platform, count in result.markets_scanned.items())
    lines: List[str] = [
        "ARBITRAGE SCAN",
        RULE,
        f"Scanned {result.total_markets} markets ({platforms})",
        f"Found {result.pairs_validated} matching pairs",
        "",
    ]

    if not result.opportunities:
        lines.append("No profitable arbitrage found.")
        if result.filtered_count:
            lines.append(f"({result.filtered_count} low-confidence opportunities filtered)")
    else:
        best = max(opp.net_profit_pct for opp in result.opportunities) * 100
        lines.append(f"FOUND {len(result.opportunities)} OPPORTUNITIES (up to {best:.1f}% profit)")
        lines.append("")
        for index, opp in enumerate(result.opportunities, start=1):
            lines.append(format_opportunity(opp, index))
            lines.append(RULE)

    if result.warnings:
        lines.append("")
        lines.append("WARNINGS")
        lines.extend(f"  {warning}" for warning in result.warnings)
    return "\n".join(lines)


def opportunity_to_dict(opp: ValidatedArbitrageOpportunity) -> dict:
    pair = opp.pair
    return {
        "id": opp.id,
        "timestamp": opp.timestamp.isoformat(),
        "strategy": opp.strategy.type,
        "description": opp.strategy.description,
        "legs": [
            {
                "platform": leg.platform,
                "market_id": leg.market.market_id,
                "side": leg.side,
                "action": leg.action,
                "target_price": leg.target_price,
                "estimated_slippage": leg.estimated_slippage,
            }
            for leg in opp.strategy.legs
        ],
        "guaranteed_return": opp.strategy.guaranteed_return,
        "net_profit_pct": opp.net_profit_pct,
        "gross_profit_pct": opp.gross_profit_pct,
        "costs": {
            "trading_fees": opp.total_costs.trading_fees,
            "slippage": opp.total_costs.slippage,
            "spread_cost": opp.total_costs.spread_cost,
            "settlement_fees": opp.total_costs.settlement_fees,
            "total_cost": opp.total_costs.total_cost,
        },
        "equivalence": {
            "overall_score": pair.equivalence.overall_score,
            "title_similarity": pair.equivalence.title_similarity,
            "entity_overlap": pair.equivalence.entity_overlap,
            "matching_entities": list(pair.equivalence.matching_entities),
            "warnings": list(pair.equivalence.warnings),
            "inverted": pair.outcome_mapping.is_inverted,
        },
        "risk": {
            "overall": opp.risk.overall_risk_score,
            "execution": opp.risk.execution_risk.score,
            "market": opp.risk.market_risk.score,
            "operational": opp.risk.operational_risk.score,
            "is_safe": opp.risk.is_safe,
            "reason": opp.risk.safety_reason,
            "flags": [flag.code for flag in opp.risk.flags],
        },
        "execution": {
            "leg_order": list(opp.execution.leg_order),
            "recommended_size": opp.execution.recommended_size,
            "max_size": opp.execution.max_size,
            "min_size": opp.execution.min_size,
            "abort_conditions": list(opp.execution.abort_conditions),
        },
        "confidence": {
            "score": opp.confidence.score,
            "grade": opp.confidence.grade,
            "recommendation": opp.confidence.recommendation,
        },
    }
