from __future__ import annotations

import logging
from typing import Optional

from arbmatch.config import DEFAULT_CONFIG, ArbitrageConfig
from arbmatch.models import (
    ArbitrageResult,
    CostBreakdown,
    LegQuote,
    Side,
    StrategyType,
    ValidatedMarketPair,
)
from arbmatch.pricing import estimate_slippage, fee_rate, fees_for, get_executable_price

logger = logging.getLogger(__name__)

GUARANTEED_PAYOUT = 1.0


def calculate_cross_platform_arbitrage(
    pair: ValidatedMarketPair,
    config: ArbitrageConfig = DEFAULT_CONFIG,
) -> Optional[ArbitrageResult]:
    """Best two-leg spread across the pair, or None when neither direction nets a profit.

    Holding YES on one venue and NO on the other pays exactly 1 whichever way
    the event resolves. Buying NO is priced as ``1 - yes_bid``. When the pair
    is inverted, B's book is first restated in A's outcome space.
    """
    market_a = pair.market_a
    market_b = pair.market_b
    price_a = get_executable_price(market_a)
    price_b = get_executable_price(market_b)
    rate_a = fee_rate(fees_for(market_a.platform), config.trader_volume_usd)
    rate_b = fee_rate(fees_for(market_b.platform), config.trader_volume_usd)

    inverted = pair.outcome_mapping.is_inverted
    if inverted:
        b_yes_ask = 1.0 - price_b.bid_price
        b_yes_bid = 1.0 - price_b.ask_price
    else:
        b_yes_ask = price_b.ask_price
        b_yes_bid = price_b.bid_price

    # YES on A, the opposite outcome on B
    first = _evaluate(
        description=f"Buy YES @ {market_a.platform} + NO @ {market_b.platform}",
        leg_a=LegQuote(market_a.platform, Side.YES, price_a.ask_price),
        leg_b=LegQuote(market_b.platform, Side.YES if inverted else Side.NO, 1.0 - b_yes_bid),
        rate_a=rate_a,
        rate_b=rate_b,
    )
    # YES on B, NO on A
    second = _evaluate(
        description=f"Buy YES @ {market_b.platform} + NO @ {market_a.platform}",
        leg_a=LegQuote(market_a.platform, Side.NO, 1.0 - price_a.bid_price),
        leg_b=LegQuote(market_b.platform, Side.NO if inverted else Side.YES, b_yes_ask),
        rate_a=rate_a,
        rate_b=rate_b,
    )

    best = first
    if second is not None and (best is None or second.net_profit > best.net_profit):
        best = second

    if best is None:
        logger.debug("No spread a=%s b=%s", market_a.market_id, market_b.market_id)
    return best


def _evaluate(
    description: str,
    leg_a: LegQuote,
    leg_b: LegQuote,
    rate_a: float,
    rate_b: float,
) -> Optional[ArbitrageResult]:
    gross_cost = leg_a.price + leg_b.price
    if gross_cost >= GUARANTEED_PAYOUT or gross_cost <= 0:
        return None
    gross_profit = GUARANTEED_PAYOUT - gross_cost
    fees = leg_a.price * rate_a + leg_b.price * rate_b
    net_profit = gross_profit - fees
    if net_profit <= 0:
        return None
    net_cost = gross_cost + fees
    return ArbitrageResult(
        strategy=StrategyType.CROSS_PLATFORM_SPREAD,
        description=description,
        leg_a=leg_a,
        leg_b=leg_b,
        gross_cost=gross_cost,
        guaranteed_payout=GUARANTEED_PAYOUT,
        gross_profit=gross_profit,
        gross_profit_pct=gross_profit / gross_cost,
        total_fees=fees,
        net_cost=net_cost,
        net_profit=net_profit,
        net_profit_pct=net_profit / net_cost,
    )


def calculate_costs(
    result: ArbitrageResult,
    pair: ValidatedMarketPair,
    position_usd: float,
    config: ArbitrageConfig = DEFAULT_CONFIG,
) -> CostBreakdown:
    price_a = get_executable_price(pair.market_a)
    price_b = get_executable_price(pair.market_b)
    fees_a = fees_for(pair.market_a.platform)
    fees_b = fees_for(pair.market_b.platform)

    trading_fees = position_usd * (
        result.leg_a.price * fee_rate(fees_a, config.trader_volume_usd)
        + result.leg_b.price * fee_rate(fees_b, config.trader_volume_usd)
    )
    slippage = position_usd * (
        estimate_slippage(price_a, position_usd * result.leg_a.price)
        + estimate_slippage(price_b, position_usd * result.leg_b.price)
    )
    spread_cost = position_usd * (price_a.spread / 2 + price_b.spread / 2)
    settlement_fees = position_usd * (fees_a.settlement_fee + fees_b.settlement_fee)
    total_cost = trading_fees + slippage + spread_cost + settlement_fees

    return CostBreakdown(
        trading_fees=trading_fees,
        slippage=slippage,
        spread_cost=spread_cost,
        settlement_fees=settlement_fees,
        total_cost=total_cost,
        cost_as_pct_of_capital=total_cost / position_usd if position_usd else 0.0,
    )
