from arbmatch.config import DEFAULT_CONFIG, ArbitrageConfig
from arbmatch.models import ArbitrageResult, ExecutionPlan, RiskAssessment, ValidatedMarketPair

MIN_PROFIT_USD = 10.0

FALLBACK_STRATEGY = "Cancel second leg if first leg executes at worse price"

ABORT_CONDITIONS = (
    "Price moves more than 2% during execution",
    "Insufficient liquidity at execution time",
    "Platform API unavailable",
)


def create_execution_plan(
    pair: ValidatedMarketPair,
    result: ArbitrageResult,
    risk: RiskAssessment,
    config: ArbitrageConfig = DEFAULT_CONFIG,
) -> ExecutionPlan:
    # Thinner book first: if it cannot fill, nothing has been committed yet.
    if pair.market_a.effective_liquidity < pair.market_b.effective_liquidity:
        leg_order = [0, 1]
    else:
        leg_order = [1, 0]

    max_size = min(risk.execution_risk.max_executable_size, config.max_position_usd)
    if result.net_profit > 0 and result.net_profit_pct > 0:
        min_size = MIN_PROFIT_USD / result.net_profit_pct
    else:
        min_size = config.default_position_usd
    recommended = min(max_size, max(min_size, config.default_position_usd))

    return ExecutionPlan(
        leg_order=leg_order,
        estimated_execution_time_ms=risk.execution_risk.execution_window_ms,
        max_acceptable_delay_ms=config.max_execution_time_ms,
        recommended_size=recommended,
        max_size=max_size,
        min_size=min_size,
        max_price_deviation=config.max_price_deviation,
        fallback_strategy=FALLBACK_STRATEGY,
        abort_conditions=list(ABORT_CONDITIONS),
    )
