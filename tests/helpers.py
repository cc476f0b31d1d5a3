from typing import Optional

from arbmatch.config import DEFAULT_CONFIG, ArbitrageConfig
from arbmatch.extractors import extract_metadata
from arbmatch.matching import calculate_equivalence
from arbmatch.models import Market, Orderbook, OutcomeMapping, ValidatedMarketPair

ELECTION_TITLE = "Will Trump win the 2028 presidential election?"

ALIGNED = OutcomeMapping(a_to_b={0: 0, 1: 1}, b_to_a={0: 0, 1: 1}, is_inverted=False)
INVERTED = OutcomeMapping(a_to_b={0: 1, 1: 0}, b_to_a={0: 1, 1: 0}, is_inverted=True)


def make_market(
    platform: str,
    market_id: str,
    title: str = ELECTION_TITLE,
    yes_price: float = 0.5,
    volume: float = 200_000.0,
    liquidity: Optional[float] = 20_000.0,
    bid: Optional[float] = None,
    ask: Optional[float] = None,
) -> Market:
    orderbook = Orderbook(yes_bid=bid, yes_ask=ask) if bid is not None and ask is not None else None
    return Market(
        platform=platform,
        market_id=market_id,
        title=title,
        yes_price=yes_price,
        volume=volume,
        liquidity=liquidity,
        orderbook=orderbook,
    )


def make_pair(
    market_a: Market,
    market_b: Market,
    inverted: bool = False,
    config: ArbitrageConfig = DEFAULT_CONFIG,
) -> ValidatedMarketPair:
    meta_a = extract_metadata(market_a)
    meta_b = extract_metadata(market_b)
    return ValidatedMarketPair(
        market_a=market_a,
        market_b=market_b,
        metadata_a=meta_a,
        metadata_b=meta_b,
        equivalence=calculate_equivalence(meta_a, meta_b, config),
        outcome_mapping=INVERTED if inverted else ALIGNED,
    )


def spread_pair(**overrides) -> ValidatedMarketPair:
    """Polymarket YES asks 0.40 while Manifold YES bids 0.65."""
    market_a = make_market("polymarket", "poly-1", yes_price=0.39, bid=0.38, ask=0.40, **overrides)
    market_b = make_market("manifold", "mani-1", yes_price=0.66, bid=0.65, ask=0.67, **overrides)
    return make_pair(market_a, market_b)
