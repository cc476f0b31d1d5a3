from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional


class Category:
    POLITICS = "politics"
    ECONOMICS = "economics"
    CRYPTO = "crypto"
    SPORTS = "sports"
    TECH = "tech"
    ENTERTAINMENT = "entertainment"
    SCIENCE = "science"
    OTHER = "other"

    ALL = (POLITICS, ECONOMICS, CRYPTO, SPORTS, TECH, ENTERTAINMENT, SCIENCE, OTHER)


class OutcomeType:
    BINARY = "binary"
    MULTI = "multi"
    SCALAR = "scalar"


class Side:
    YES = "YES"
    NO = "NO"


class StrategyType:
    CROSS_PLATFORM_SPREAD = "CROSS_PLATFORM_SPREAD"


class Severity:
    INFO = "INFO"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"


@dataclass(frozen=True)
class Orderbook:
    yes_bid: float
    yes_ask: float


@dataclass(frozen=True)
class Market:
    platform: str
    market_id: str
    title: str
    yes_price: float
    volume: float
    url: str = ""
    question: Optional[str] = None
    liquidity: Optional[float] = None
    end_date: Optional[datetime] = None
    orderbook: Optional[Orderbook] = None

    @property
    def no_price(self) -> float:
        return 1.0 - self.yes_price

    @property
    def text(self) -> str:
        return self.title or self.question or ""

    @property
    def effective_liquidity(self) -> float:
        # Venues that do not report liquidity get a tenth of lifetime volume.
        if self.liquidity:
            return self.liquidity
        return (self.volume or 0.0) * 0.1


@dataclass(frozen=True)
class ExtractedDate:
    raw: str
    normalized: Optional[date]
    type: str


@dataclass(frozen=True)
class ExtractedAmount:
    raw: str
    value: float
    unit: str


@dataclass(frozen=True)
class ExtractedEntities:
    people: List[str] = field(default_factory=list)
    organizations: List[str] = field(default_factory=list)
    locations: List[str] = field(default_factory=list)
    events: List[str] = field(default_factory=list)
    dates: List[ExtractedDate] = field(default_factory=list)
    amounts: List[ExtractedAmount] = field(default_factory=list)

    def named_count(self) -> int:
        return len(self.people) + len(self.organizations) + len(self.events) + len(self.amounts)


@dataclass(frozen=True)
class MarketMetadata:
    platform: str
    market_id: str
    title: str
    event_date: Optional[date]
    resolution_date: Optional[datetime]
    resolution_source: Optional[str]
    outcome_type: str
    outcomes: List[str]
    category: str
    subcategory: Optional[str]
    entities: ExtractedEntities


@dataclass(frozen=True)
class FilterResult:
    passes: bool
    reason: Optional[str] = None


@dataclass(frozen=True)
class EntityComparison:
    score: float
    matching: List[str]
    conflicting: List[str]


@dataclass(frozen=True)
class EquivalenceValidations:
    same_core_event: bool
    same_timeframe: bool
    same_outcome_structure: bool
    no_resolution_conflict: bool
    entities_match: bool

    def failed_count(self) -> int:
        flags = [
            self.same_core_event,
            self.same_timeframe,
            self.same_outcome_structure,
            self.no_resolution_conflict,
            self.entities_match,
        ]
        return sum(1 for flag in flags if not flag)


@dataclass(frozen=True)
class EquivalenceScore:
    overall_score: float
    title_similarity: float
    entity_overlap: float
    date_alignment: float
    category_match: float
    outcome_alignment: float
    validations: EquivalenceValidations
    warnings: List[str]
    disqualifiers: List[str]
    matching_entities: List[str] = field(default_factory=list)
    conflicting_entities: List[str] = field(default_factory=list)

    @property
    def is_disqualified(self) -> bool:
        return bool(self.disqualifiers)


@dataclass(frozen=True)
class OutcomeMapping:
    a_to_b: Dict[int, int]
    b_to_a: Dict[int, int]
    is_inverted: bool


@dataclass(frozen=True)
class ValidatedMarketPair:
    market_a: Market
    market_b: Market
    metadata_a: MarketMetadata
    metadata_b: MarketMetadata
    equivalence: EquivalenceScore
    outcome_mapping: OutcomeMapping


@dataclass(frozen=True)
class OrderBookDepth:
    volume_at_1pct: float
    volume_at_2pct: float
    volume_at_5pct: float
    price_impact_100: float
    price_impact_1000: float
    price_impact_10000: float


@dataclass(frozen=True)
class ExecutablePrice:
    mid_price: float
    bid_price: float
    ask_price: float
    spread: float
    bid_size: float
    ask_size: float
    depth: OrderBookDepth
    timestamp: datetime
    is_stale: bool = False


@dataclass(frozen=True)
class VolumeDiscount:
    min_volume: float
    fee_rate: float


@dataclass(frozen=True)
class FeeStructure:
    trading_fee: float
    withdrawal_fee: float
    settlement_fee: float
    volume_discounts: List[VolumeDiscount] = field(default_factory=list)


@dataclass(frozen=True)
class LegQuote:
    platform: str
    side: str
    price: float


@dataclass(frozen=True)
class ArbitrageResult:
    strategy: str
    description: str
    leg_a: LegQuote
    leg_b: LegQuote
    gross_cost: float
    guaranteed_payout: float
    gross_profit: float
    gross_profit_pct: float
    total_fees: float
    net_cost: float
    net_profit: float
    net_profit_pct: float


@dataclass(frozen=True)
class CostBreakdown:
    trading_fees: float
    slippage: float
    spread_cost: float
    settlement_fees: float
    total_cost: float
    cost_as_pct_of_capital: float


@dataclass(frozen=True)
class ArbitrageLeg:
    platform: str
    market: Market
    side: str
    action: str
    target_price: float
    executable_price: ExecutablePrice
    fees: FeeStructure
    estimated_slippage: float


@dataclass(frozen=True)
class ArbitrageStrategy:
    type: str
    description: str
    legs: List[ArbitrageLeg]
    guaranteed_return: float


@dataclass(frozen=True)
class ExecutionRisk:
    score: int
    liquidity_risk: int
    slippage_risk: int
    timing_risk: int
    max_executable_size: float
    expected_slippage: float
    execution_window_ms: int


@dataclass(frozen=True)
class MarketRisk:
    score: int
    resolution_risk: int
    correlation_risk: int
    price_volatility: int
    historical_volatility: float
    resolution_days: float


@dataclass(frozen=True)
class OperationalRisk:
    score: int
    platform_reliability: Dict[str, int]
    settlement_risk: float
    regulatory_risk: int


@dataclass(frozen=True)
class RiskFlag:
    severity: str
    code: str
    message: str
    details: Optional[str] = None


@dataclass(frozen=True)
class RiskAssessment:
    overall_risk_score: int
    execution_risk: ExecutionRisk
    market_risk: MarketRisk
    operational_risk: OperationalRisk
    flags: List[RiskFlag]
    is_safe: bool
    safety_reason: str


@dataclass(frozen=True)
class ExecutionPlan:
    leg_order: List[int]
    estimated_execution_time_ms: int
    max_acceptable_delay_ms: int
    recommended_size: float
    max_size: float
    min_size: float
    max_price_deviation: float
    fallback_strategy: str
    abort_conditions: List[str]


@dataclass(frozen=True)
class ArbitrageConfidence:
    score: int
    match_confidence: float
    price_confidence: int
    execution_confidence: int
    profit_confidence: int
    grade: str
    recommendation: str


@dataclass(frozen=True)
class ValidatedArbitrageOpportunity:
    id: str
    timestamp: datetime
    pair: ValidatedMarketPair
    strategy: ArbitrageStrategy
    net_profit_pct: float
    gross_profit_pct: float
    total_costs: CostBreakdown
    risk: RiskAssessment
    execution: ExecutionPlan
    confidence: ArbitrageConfidence
