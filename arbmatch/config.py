import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass(frozen=True)
class ArbitrageConfig:
    # Matching
    min_equivalence_score: float = 0.80
    min_title_similarity: float = 0.30

    # Profit, as a fraction of capital
    min_net_profit_pct: float = 0.02

    # Risk, 0-100
    max_risk_score: int = 60
    max_execution_risk: int = 50

    # Liquidity
    min_liquidity_usd: float = 500.0

    # Sizing
    default_position_usd: float = 100.0
    max_position_usd: float = 1000.0

    # Execution
    max_execution_time_ms: int = 5000
    max_price_deviation: float = 0.02

    # Trailing traded volume used to pick a venue's fee tier
    trader_volume_usd: float = 0.0


DEFAULT_CONFIG = ArbitrageConfig()


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid float for {name}: {raw}") from exc


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid int for {name}: {raw}") from exc


def load_config() -> ArbitrageConfig:
    load_dotenv()
    base = DEFAULT_CONFIG

    return ArbitrageConfig(
        min_equivalence_score=_get_float("ARBMATCH_MIN_EQUIVALENCE_SCORE", base.min_equivalence_score),
        min_title_similarity=_get_float("ARBMATCH_MIN_TITLE_SIMILARITY", base.min_title_similarity),
        min_net_profit_pct=_get_float("ARBMATCH_MIN_NET_PROFIT_PCT", base.min_net_profit_pct),
        max_risk_score=_get_int("ARBMATCH_MAX_RISK_SCORE", base.max_risk_score),
        max_execution_risk=_get_int("ARBMATCH_MAX_EXECUTION_RISK", base.max_execution_risk),
        min_liquidity_usd=_get_float("ARBMATCH_MIN_LIQUIDITY_USD", base.min_liquidity_usd),
        default_position_usd=_get_float("ARBMATCH_DEFAULT_POSITION_USD", base.default_position_usd),
        max_position_usd=_get_float("ARBMATCH_MAX_POSITION_USD", base.max_position_usd),
        max_execution_time_ms=_get_int("ARBMATCH_MAX_EXECUTION_TIME_MS", base.max_execution_time_ms),
        max_price_deviation=_get_float("ARBMATCH_MAX_PRICE_DEVIATION", base.max_price_deviation),
        trader_volume_usd=_get_float("ARBMATCH_TRADER_VOLUME_USD", base.trader_volume_usd),
    )
