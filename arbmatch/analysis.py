from __future__ import annotations

import logging
import time
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from arbmatch.arb import calculate_costs, calculate_cross_platform_arbitrage
from arbmatch.confidence import calculate_confidence
from arbmatch.config import DEFAULT_CONFIG, ArbitrageConfig
from arbmatch.execution import create_execution_plan
from arbmatch.models import (
    ArbitrageLeg,
    ArbitrageStrategy,
    LegQuote,
    Market,
    ValidatedArbitrageOpportunity,
    ValidatedMarketPair,
)
from arbmatch.pricing import estimate_slippage, fees_for, get_executable_price
from arbmatch.risk import assess_risk

logger = logging.getLogger(__name__)


def new_opportunity_id() -> str:
    return f"arb-{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}"


def analyze_arbitrage(
    pair: ValidatedMarketPair,
    config: ArbitrageConfig = DEFAULT_CONFIG,
    now: Optional[datetime] = None,
) -> Optional[ValidatedArbitrageOpportunity]:
    result = calculate_cross_platform_arbitrage(pair, config)
    if result is None:
        return None
    if result.net_profit_pct < config.min_net_profit_pct:
        logger.debug(
            "Below profit floor a=%s b=%s net=%.4f",
            pair.market_a.market_id,
            pair.market_b.market_id,
            result.net_profit_pct,
        )
        return None

    position = config.default_position_usd
    costs = calculate_costs(result, pair, position, config)

    # Costs are dollars on the whole position; the result is per $1 payout.
    extra_per_dollar = (costs.slippage + costs.spread_cost) / position if position else 0.0
    adjusted_profit = result.net_profit - extra_per_dollar
    adjusted_pct = adjusted_profit / (result.net_cost + extra_per_dollar)
    if adjusted_pct < config.min_net_profit_pct:
        logger.debug(
            "Below profit floor after costs a=%s b=%s adjusted=%.4f",
            pair.market_a.market_id,
            pair.market_b.market_id,
            adjusted_pct,
        )
        return None

    timestamp = now or datetime.now(timezone.utc)
    risk = assess_risk(pair, result, costs, config, now=timestamp)
    execution = create_execution_plan(pair, result, risk, config)
    confidence = calculate_confidence(pair, result, risk, config)

    strategy = ArbitrageStrategy(
        type=result.strategy,
        description=result.description,
        legs=[
            _build_leg(result.leg_a, pair.market_a, config),
            _build_leg(result.leg_b, pair.market_b, config),
        ],
        guaranteed_return=result.guaranteed_payout / result.net_cost,
    )

    opportunity = ValidatedArbitrageOpportunity(
        id=new_opportunity_id(),
        timestamp=timestamp,
        pair=pair,
        strategy=strategy,
        net_profit_pct=adjusted_pct,
        gross_profit_pct=result.gross_profit_pct,
        total_costs=costs,
        risk=risk,
        execution=execution,
        confidence=confidence,
    )
    logger.info(
        "Opportunity %s %s net=%.2f%% grade=%s safe=%s",
        opportunity.id,
        result.description,
        adjusted_pct * 100,
        confidence.grade,
        risk.is_safe,
    )
    return opportunity


def _build_leg(quote: LegQuote, market: Market, config: ArbitrageConfig) -> ArbitrageLeg:
    price = get_executable_price(market)
    return ArbitrageLeg(
        platform=quote.platform,
        market=market,
        side=quote.side,
        action="BUY",
        target_price=quote.price,
        executable_price=price,
        fees=fees_for(quote.platform),
        estimated_slippage=estimate_slippage(price, config.default_position_usd * quote.price),
    )


def find_arbitrage_opportunities(
    pairs: List[ValidatedMarketPair],
    config: ArbitrageConfig = DEFAULT_CONFIG,
) -> List[ValidatedArbitrageOpportunity]:
    opportunities: List[ValidatedArbitrageOpportunity] = []
    for pair in pairs:
        opportunity = analyze_arbitrage(pair, config)
        if opportunity is not None:
            opportunities.append(opportunity)
    # sorted() is stable, so equal margins keep input order.
    return sorted(opportunities, key=lambda opp: -opp.net_profit_pct)

