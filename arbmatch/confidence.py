from arbmatch.config import DEFAULT_CONFIG, ArbitrageConfig
from arbmatch.models import ArbitrageConfidence, ArbitrageResult, RiskAssessment, ValidatedMarketPair
from arbmatch.pricing import get_executable_price

GRADE_THRESHOLDS = (
    (90, "A"),
    (75, "B"),
    (60, "C"),
    (40, "D"),
)
FAILING_GRADE = "F"

RECOMMENDATIONS = {
    "A": "High confidence opportunity. Safe to execute with recommended size.",
    "B": "Good opportunity. Proceed with caution, use smaller position size.",
    "C": "Moderate opportunity. Manual review recommended before execution.",
    "D": "Low confidence. Not recommended without additional verification.",
    "F": "Do not execute. Insufficient confidence in opportunity validity.",
}

GRADE_ORDER = ("A", "B", "C", "D", "F")


def grade_for_score(score: float) -> str:
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return FAILING_GRADE


def grade_at_least(grade: str, minimum: str) -> bool:
    return GRADE_ORDER.index(grade) <= GRADE_ORDER.index(minimum)


def calculate_confidence(
    pair: ValidatedMarketPair,
    result: ArbitrageResult,
    risk: RiskAssessment,
    config: ArbitrageConfig = DEFAULT_CONFIG,
) -> ArbitrageConfidence:
    match_confidence = pair.equivalence.overall_score * 100

    mean_spread = (
        get_executable_price(pair.market_a).spread + get_executable_price(pair.market_b).spread
    ) / 2
    if mean_spread < 0.02:
        price_confidence = 90
    elif mean_spread < 0.05:
        price_confidence = 70
    else:
        price_confidence = 50

    execution_confidence = max(0, 100 - risk.execution_risk.score)

    margin = result.net_profit_pct
    floor = config.min_net_profit_pct
    if margin > floor * 3:
        profit_confidence = 90
    elif margin > floor * 2:
        profit_confidence = 70
    elif margin > floor:
        profit_confidence = 50
    else:
        profit_confidence = 30

    score = round(
        0.35 * match_confidence
        + 0.25 * price_confidence
        + 0.25 * execution_confidence
        + 0.15 * profit_confidence
    )
    grade = grade_for_score(score)
    return ArbitrageConfidence(
        score=score,
        match_confidence=match_confidence,
        price_confidence=price_confidence,
        execution_confidence=execution_confidence,
        profit_confidence=profit_confidence,
        grade=grade,
        recommendation=RECOMMENDATIONS[grade],
    )
