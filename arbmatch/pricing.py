from datetime import datetime, timezone
from typing import Dict, Optional

from arbmatch.models import ExecutablePrice, FeeStructure, Market, OrderBookDepth, VolumeDiscount

DEFAULT_FEE_PLATFORM = "polymarket"

PLATFORM_FEES: Dict[str, FeeStructure] = {
    "polymarket": FeeStructure(trading_fee=0.0, withdrawal_fee=0.0, settlement_fee=0.0),
    "kalshi": FeeStructure(
        trading_fee=0.01,
        withdrawal_fee=0.0,
        settlement_fee=0.0,
        volume_discounts=[
            VolumeDiscount(min_volume=10_000, fee_rate=0.007),
            VolumeDiscount(min_volume=100_000, fee_rate=0.005),
        ],
    ),
    "manifold": FeeStructure(trading_fee=0.0, withdrawal_fee=0.0, settlement_fee=0.0),
    "limitless": FeeStructure(trading_fee=0.005, withdrawal_fee=0.0, settlement_fee=0.0),
    "metaculus": FeeStructure(trading_fee=0.0, withdrawal_fee=0.0, settlement_fee=0.0),
}

# Quote synthesized around the last price when no orderbook is available.
SYNTHETIC_SPREAD = 0.02
MIN_QUOTE_SIZE = 100.0
QUOTE_SIZE_VOLUME_SHARE = 0.05


def fees_for(platform: str) -> FeeStructure:
    return PLATFORM_FEES.get(platform, PLATFORM_FEES[DEFAULT_FEE_PLATFORM])


def fee_rate(fees: FeeStructure, traded_volume: float = 0.0) -> float:
    rate = fees.trading_fee
    reached = -1.0
    for tier in fees.volume_discounts:
        if traded_volume >= tier.min_volume and tier.min_volume > reached:
            rate = tier.fee_rate
            reached = tier.min_volume
    return rate


def estimate_size(volume: float) -> float:
    return max(MIN_QUOTE_SIZE, (volume or 0.0) * QUOTE_SIZE_VOLUME_SHARE)


def estimate_depth(market: Market) -> OrderBookDepth:
    volume = market.volume or 0.0
    liquidity = market.effective_liquidity
    return OrderBookDepth(
        volume_at_1pct=min(liquidity * 0.1, 1000.0),
        volume_at_2pct=min(liquidity * 0.2, 2000.0),
        volume_at_5pct=min(liquidity * 0.4, 5000.0),
        price_impact_100=0.005 if volume > 10_000 else 0.01,
        price_impact_1000=0.01 if volume > 50_000 else 0.02,
        price_impact_10000=0.02 if volume > 100_000 else 0.05,
    )


def get_executable_price(market: Market, now: Optional[datetime] = None) -> ExecutablePrice:
    timestamp = now or datetime.now(timezone.utc)
    size = estimate_size(market.volume)
    depth = estimate_depth(market)

    book = market.orderbook
    if book is not None:
        return ExecutablePrice(
            mid_price=(book.yes_bid + book.yes_ask) / 2,
            bid_price=book.yes_bid,
            ask_price=book.yes_ask,
            spread=book.yes_ask - book.yes_bid,
            bid_size=size,
            ask_size=size,
            depth=depth,
            timestamp=timestamp,
        )

    half_spread = SYNTHETIC_SPREAD / 2
    return ExecutablePrice(
        mid_price=market.yes_price,
        bid_price=max(0.0, market.yes_price - half_spread),
        ask_price=min(1.0, market.yes_price + half_spread),
        spread=SYNTHETIC_SPREAD,
        bid_size=size,
        ask_size=size,
        depth=depth,
        timestamp=timestamp,
    )


def estimate_slippage(price: ExecutablePrice, order_usd: float) -> float:
    """Fractional price impact for an order of ``order_usd`` dollars."""
    depth = price.depth
    if order_usd <= 100:
        return depth.price_impact_100
    if order_usd <= 1000:
        return depth.price_impact_1000
    if order_usd <= 10_000:
        return depth.price_impact_10000
    return depth.price_impact_10000 * (order_usd / 10_000)
