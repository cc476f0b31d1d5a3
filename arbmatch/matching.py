from __future__ import annotations

import logging
import re
from typing import List, Optional, Tuple

from arbmatch.config import DEFAULT_CONFIG, ArbitrageConfig
from arbmatch.extractors import extract_metadata
from arbmatch.models import (
    Category,
    EntityComparison,
    EquivalenceScore,
    EquivalenceValidations,
    ExtractedEntities,
    FilterResult,
    Market,
    MarketMetadata,
    OutcomeMapping,
    ValidatedMarketPair,
)
from arbmatch.synonyms import are_synonyms
from arbmatch.tables import KEY_PHRASES, NEGATION_PATTERNS, RELATED_CATEGORIES

logger = logging.getLogger(__name__)

MAX_EVENT_DATE_GAP_DAYS = 30

# Neither side names an entity: no evidence either way, so neither reward nor
# punish the pair.
NO_ENTITY_SCORE = 0.5
ENTITY_CONFLICT_PENALTY = 0.3
AMOUNT_TOLERANCE = 0.01

# Neither side mentions a date: neutral.
NO_DATE_ALIGNMENT = 0.5
# Only one side mentions a date: the timeframes cannot be confirmed.
ONE_DATE_ALIGNMENT = 0.3

SYNONYM_BONUS_STEP = 0.05
SYNONYM_BONUS_CAP = 0.20
PHRASE_BONUS_STEP = 0.05
PHRASE_BONUS_CAP = 0.15

HIGH_TITLE_SIMILARITY = 0.75
MIN_TITLE_SIMILARITY = 0.30
VALIDATION_PENALTY = 0.1

_NON_WORD = re.compile(r"[^\w\s]")
_SPACES = re.compile(r"\s+")


def passes_hard_filters(
    meta_a: MarketMetadata,
    meta_b: MarketMetadata,
    config: ArbitrageConfig = DEFAULT_CONFIG,
) -> FilterResult:
    if meta_a.category != meta_b.category:
        related_a = RELATED_CATEGORIES.get(meta_a.category, ())
        related_b = RELATED_CATEGORIES.get(meta_b.category, ())
        if meta_b.category not in related_a and meta_a.category not in related_b:
            return FilterResult(
                False,
                f"Category mismatch: {meta_a.category} vs {meta_b.category} (not related)",
            )

    if (meta_a.category == Category.OTHER) != (meta_b.category == Category.OTHER):
        return FilterResult(
            False,
            f"Category mismatch: {meta_a.category} vs {meta_b.category} (one is uncategorized)",
        )

    if meta_a.outcome_type != meta_b.outcome_type:
        return FilterResult(
            False,
            f"Outcome type mismatch: {meta_a.outcome_type} vs {meta_b.outcome_type}",
        )

    gap = _days_apart(meta_a, meta_b)
    if gap is not None and gap > MAX_EVENT_DATE_GAP_DAYS:
        return FilterResult(False, f"Date mismatch: {gap:.0f} days apart")

    if meta_a.subcategory and meta_b.subcategory and meta_a.subcategory != meta_b.subcategory:
        return FilterResult(
            False,
            f"Subcategory mismatch: {meta_a.subcategory} vs {meta_b.subcategory}",
        )

    return FilterResult(True)


def _days_apart(meta_a: MarketMetadata, meta_b: MarketMetadata) -> Optional[float]:
    if not meta_a.event_date or not meta_b.event_date:
        return None
    return float(abs((meta_a.event_date - meta_b.event_date).days))


def compare_entities(entities_a: ExtractedEntities, entities_b: ExtractedEntities) -> EntityComparison:
    matching: List[str] = []
    conflicting: List[str] = []

    people_a = _lowered(entities_a.people)
    people_b = _lowered(entities_b.people)
    matching.extend(f"Person: {person}" for person in people_a if person in people_b)
    # Both sides name people but never the same one: same event, different subject.
    if people_a and people_b and not set(people_a) & set(people_b):
        conflicting.append(f"People: {','.join(people_a)} vs {','.join(people_b)}")

    orgs_b = _lowered(entities_b.organizations)
    matching.extend(f"Org: {org}" for org in _lowered(entities_a.organizations) if org in orgs_b)

    events_b = _lowered(entities_b.events)
    matching.extend(f"Event: {event}" for event in _lowered(entities_a.events) if event in events_b)

    for amount_a in entities_a.amounts:
        for amount_b in entities_b.amounts:
            tolerance = AMOUNT_TOLERANCE * max(abs(amount_a.value), abs(amount_b.value))
            if abs(amount_a.value - amount_b.value) <= tolerance:
                matching.append(f"Amount: {amount_a.raw}")
            elif amount_a.unit == amount_b.unit:
                conflicting.append(f"Amount: {amount_a.raw} vs {amount_b.raw}")

    total_a = entities_a.named_count()
    total_b = entities_b.named_count()
    if total_a == 0 and total_b == 0:
        return EntityComparison(score=NO_ENTITY_SCORE, matching=matching, conflicting=conflicting)

    score = len(matching) / max(total_a, total_b, 1)
    if conflicting:
        score -= ENTITY_CONFLICT_PENALTY
    return EntityComparison(score=max(0.0, score), matching=matching, conflicting=conflicting)


def _lowered(values: List[str]) -> List[str]:
    seen: List[str] = []
    for value in values:
        lowered = value.lower()
        if lowered not in seen:
            seen.append(lowered)
    return seen


def normalize_title(title: str) -> str:
    text = _NON_WORD.sub(" ", title.lower())
    return _SPACES.sub(" ", text).strip()


def character_similarity(text_a: str, text_b: str) -> float:
    # Single forward walk over both strings, not an edit distance. Thresholds
    # downstream are tuned against this cheaper measure.
    if text_a == text_b:
        return 1.0
    if not text_a or not text_b:
        return 0.0
    matches = 0
    j = 0
    for char in text_a:
        if j >= len(text_b):
            break
        if char == text_b[j]:
            matches += 1
            j += 1
    return (2 * matches) / (len(text_a) + len(text_b))


def semantic_similarity(title_a: str, title_b: str) -> float:
    norm_a = normalize_title(title_a)
    norm_b = normalize_title(title_b)

    char_score = character_similarity(norm_a, norm_b)

    words_a = {word for word in norm_a.split(" ") if len(word) > 2}
    words_b = {word for word in norm_b.split(" ") if len(word) > 2}
    union = words_a | words_b
    jaccard = len(words_a & words_b) / len(union) if union else 0.0

    synonym_matches = 0
    for word_a in sorted(words_a):
        if any(word_a != word_b and are_synonyms(word_a, word_b) for word_b in words_b):
            synonym_matches += 1
    synonym_bonus = min(SYNONYM_BONUS_CAP, synonym_matches * SYNONYM_BONUS_STEP)

    shared_phrases = sum(1 for phrase in KEY_PHRASES if phrase in norm_a and phrase in norm_b)
    phrase_bonus = min(PHRASE_BONUS_CAP, shared_phrases * PHRASE_BONUS_STEP)

    return min(1.0, 0.3 * char_score + 0.4 * jaccard + synonym_bonus + phrase_bonus)


def _date_alignment(meta_a: MarketMetadata, meta_b: MarketMetadata) -> Tuple[float, Optional[str]]:
    gap = _days_apart(meta_a, meta_b)
    if gap is not None:
        return max(0.0, 1.0 - gap / MAX_EVENT_DATE_GAP_DAYS), None
    if meta_a.event_date or meta_b.event_date:
        return ONE_DATE_ALIGNMENT, "Only one market has event date"
    return NO_DATE_ALIGNMENT, None


def _rejected(reason: str) -> EquivalenceScore:
    return EquivalenceScore(
        overall_score=0.0,
        title_similarity=0.0,
        entity_overlap=0.0,
        date_alignment=0.0,
        category_match=0.0,
        outcome_alignment=0.0,
        validations=EquivalenceValidations(
            same_core_event=False,
            same_timeframe=False,
            same_outcome_structure=False,
            no_resolution_conflict=False,
            entities_match=False,
        ),
        warnings=[],
        disqualifiers=[reason],
    )


def overall_score(
    title_similarity: float,
    entity_overlap: float,
    date_alignment: float,
    category_match: float,
    outcome_alignment: float,
    validations: EquivalenceValidations,
) -> float:
    weighted = (
        0.35 * title_similarity
        + 0.30 * entity_overlap
        + 0.15 * date_alignment
        + 0.10 * category_match
        + 0.10 * outcome_alignment
    )
    return min(1.0, max(0.0, weighted - VALIDATION_PENALTY * validations.failed_count()))


def calculate_equivalence(
    meta_a: MarketMetadata,
    meta_b: MarketMetadata,
    config: ArbitrageConfig = DEFAULT_CONFIG,
) -> EquivalenceScore:
    hard_filter = passes_hard_filters(meta_a, meta_b, config)
    if not hard_filter.passes:
        return _rejected(hard_filter.reason or "Hard filter failed")

    warnings: List[str] = []
    disqualifiers: List[str] = []

    title_similarity = semantic_similarity(meta_a.title, meta_b.title)
    entities = compare_entities(meta_a.entities, meta_b.entities)
    entity_overlap = entities.score
    if entities.conflicting:
        warnings.append(f"Conflicting entities: {', '.join(entities.conflicting)}")

    date_alignment, date_warning = _date_alignment(meta_a, meta_b)
    if date_warning:
        warnings.append(date_warning)

    category_match = 1.0 if meta_a.category == meta_b.category else 0.0
    outcome_alignment = 1.0 if meta_a.outcome_type == meta_b.outcome_type else 0.0

    validations = EquivalenceValidations(
        same_core_event=entity_overlap > 0.3 and title_similarity > 0.5,
        same_timeframe=date_alignment > 0.7,
        same_outcome_structure=outcome_alignment == 1.0,
        no_resolution_conflict=not entities.conflicting,
        entities_match=bool(entities.matching) and not entities.conflicting,
    )

    # Title similarity alone is unreliable: short titles on unrelated topics
    # still share generic words. Each guard below is independent.
    if entities.conflicting and not entities.matching:
        disqualifiers.append("No matching entities and conflicting entities detected")
    if not entities.matching and title_similarity < HIGH_TITLE_SIMILARITY:
        disqualifiers.append("No entity overlap and insufficient title similarity")
    if title_similarity < MIN_TITLE_SIMILARITY:
        disqualifiers.append(f"Title similarity too low: {title_similarity * 100:.0f}%")

    overall = overall_score(
        title_similarity, entity_overlap, date_alignment, category_match, outcome_alignment, validations
    )

    if title_similarity < config.min_title_similarity:
        warnings.append(f"Title similarity {title_similarity * 100:.0f}% below threshold")
    if entity_overlap < 0.3:
        warnings.append("Low entity overlap - markets may not be equivalent")

    return EquivalenceScore(
        overall_score=overall,
        title_similarity=title_similarity,
        entity_overlap=entity_overlap,
        date_alignment=date_alignment,
        category_match=category_match,
        outcome_alignment=outcome_alignment,
        validations=validations,
        warnings=warnings,
        disqualifiers=disqualifiers,
        matching_entities=entities.matching,
        conflicting_entities=entities.conflicting,
    )


def has_negation(title: str) -> bool:
    lowered = title.lower()
    return any(pattern.search(lowered) for pattern in NEGATION_PATTERNS)


def determine_outcome_mapping(meta_a: MarketMetadata, meta_b: MarketMetadata) -> OutcomeMapping:
    # Phrasing heuristic only: "Will X happen?" vs "Will X not happen?".
    if has_negation(meta_a.title) != has_negation(meta_b.title):
        return OutcomeMapping(a_to_b={0: 1, 1: 0}, b_to_a={0: 1, 1: 0}, is_inverted=True)
    return OutcomeMapping(a_to_b={0: 0, 1: 1}, b_to_a={0: 0, 1: 1}, is_inverted=False)


def match_markets(
    markets_a: List[Market],
    markets_b: List[Market],
    config: ArbitrageConfig = DEFAULT_CONFIG,
) -> List[ValidatedMarketPair]:
    """Pair each market in ``markets_a`` with its best equivalent in ``markets_b``.

    Selection is greedy per A-market, so one B-market may be chosen by several
    A-markets. Ties keep the earliest candidate; output is ordered by overall
    score, then by position in ``markets_a``.
    """
    metadata_a = [(market, extract_metadata(market)) for market in markets_a]
    metadata_b = [(market, extract_metadata(market)) for market in markets_b]

    ranked: List[Tuple[float, int, ValidatedMarketPair]] = []
    comparisons = 0
    for index, (market_a, meta_a) in enumerate(metadata_a):
        best: Optional[Tuple[Market, MarketMetadata, EquivalenceScore]] = None
        for market_b, meta_b in metadata_b:
            if market_a.platform == market_b.platform:
                logger.warning(
                    "Skipping same-platform pair platform=%s a=%s b=%s",
                    market_a.platform,
                    market_a.market_id,
                    market_b.market_id,
                )
                continue
            comparisons += 1
            equivalence = calculate_equivalence(meta_a, meta_b, config)
            logger.debug(
                "Scored a=%s b=%s overall=%.3f title=%.3f entity=%.3f disqualifiers=%s",
                market_a.market_id,
                market_b.market_id,
                equivalence.overall_score,
                equivalence.title_similarity,
                equivalence.entity_overlap,
                equivalence.disqualifiers,
            )
            if equivalence.disqualifiers:
                continue
            if equivalence.overall_score < config.min_equivalence_score:
                continue
            if best is None or equivalence.overall_score > best[2].overall_score:
                best = (market_b, meta_b, equivalence)

        if best is None:
            continue
        market_b, meta_b, equivalence = best
        logger.info(
            "Matched %s:%s <-> %s:%s score=%.2f",
            market_a.platform,
            market_a.market_id,
            market_b.platform,
            market_b.market_id,
            equivalence.overall_score,
        )
        pair = ValidatedMarketPair(
            market_a=market_a,
            market_b=market_b,
            metadata_a=meta_a,
            metadata_b=meta_b,
            equivalence=equivalence,
            outcome_mapping=determine_outcome_mapping(meta_a, meta_b),
        )
        ranked.append((equivalence.overall_score, index, pair))

    ranked.sort(key=lambda item: (-item[0], item[1]))
    logger.info("Matching done: comparisons=%d validated=%d", comparisons, len(ranked))
    return [pair for _, _, pair in ranked]


def matching_stats(pairs: List[ValidatedMarketPair]) -> dict:
    if not pairs:
        return {
            "total": 0,
            "avg_equivalence": 0.0,
            "avg_title_similarity": 0.0,
            "avg_entity_overlap": 0.0,
            "inverted_count": 0,
        }
    total = len(pairs)
    return {
        "total": total,
        "avg_equivalence": sum(p.equivalence.overall_score for p in pairs) / total,
        "avg_title_similarity": sum(p.equivalence.title_similarity for p in pairs) / total,
        "avg_entity_overlap": sum(p.equivalence.entity_overlap for p in pairs) / total,
        "inverted_count": sum(1 for p in pairs if p.outcome_mapping.is_inverted),
    }
