from __future__ import annotations

import calendar
import re
from datetime import date
from typing import List, Optional, Tuple

from arbmatch.models import (
    Category,
    ExtractedAmount,
    ExtractedDate,
    ExtractedEntities,
    Market,
    MarketMetadata,
    OutcomeType,
)
from arbmatch.tables import (
    AMOUNT_PATTERNS,
    CATEGORY_RULES,
    CRYPTO_UNITS,
    DATE_PHRASES,
    EVENTS,
    LOCATIONS,
    MONTHS,
    MULTIPLIERS,
    ORGANIZATIONS,
    PEOPLE,
    QUARTERS,
    RESOLUTION_SOURCES,
    SUBCATEGORY_RULES,
    Rule,
)

_YEAR = re.compile(r"\b(20\d{2})\b")


def extract_metadata(market: Market) -> MarketMetadata:
    title = market.text
    return MarketMetadata(
        platform=market.platform,
        market_id=market.market_id or "",
        title=title,
        event_date=extract_event_date(title),
        resolution_date=market.end_date,
        resolution_source=extract_resolution_source(title),
        outcome_type=OutcomeType.BINARY,
        outcomes=["Yes", "No"],
        category=categorize(title),
        subcategory=extract_subcategory(title),
        entities=extract_entities(title),
    )


def extract_event_date(text: str) -> Optional[date]:
    lowered = text.lower()
    year_match = _YEAR.search(lowered)
    if not year_match:
        return None
    year = int(year_match.group(1))

    for name, month in MONTHS:
        if not re.search(rf"\b{name}\b", lowered):
            continue
        day_match = re.search(rf"\b{name}\s+(\d{{1,2}})(?!\d)", lowered)
        day = int(day_match.group(1)) if day_match else 1
        return _safe_date(year, month, day)

    for keywords, month, day in QUARTERS:
        if any(keyword in lowered for keyword in keywords):
            return date(year, month, day)

    return date(year, 12, 31)


def _safe_date(year: int, month: int, day: int) -> date:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(max(day, 1), last_day))


def extract_resolution_source(text: str) -> Optional[str]:
    return _first_label(RESOLUTION_SOURCES, text.lower())


def categorize(text: str) -> str:
    lowered = text.lower()
    for category, patterns in CATEGORY_RULES:
        if any(pattern.search(lowered) for pattern in patterns):
            return category
    return Category.OTHER


def extract_subcategory(text: str) -> Optional[str]:
    return _first_label(SUBCATEGORY_RULES, text.lower())


def extract_entities(text: str) -> ExtractedEntities:
    lowered = text.lower()
    return ExtractedEntities(
        people=_all_labels(PEOPLE, lowered),
        organizations=_all_labels(ORGANIZATIONS, lowered),
        locations=_all_labels(LOCATIONS, lowered),
        events=_all_labels(EVENTS, lowered),
        dates=_extract_dates(lowered),
        amounts=_extract_amounts(lowered),
    )


def _first_label(rules: Tuple[Rule, ...], text: str) -> Optional[str]:
    for pattern, label in rules:
        if pattern.search(text):
            return label
    return None


def _all_labels(rules: Tuple[Rule, ...], text: str) -> List[str]:
    labels: List[str] = []
    for pattern, label in rules:
        if pattern.search(text) and label not in labels:
            labels.append(label)
    return labels


def _extract_dates(text: str) -> List[ExtractedDate]:
    dates: List[ExtractedDate] = []
    for pattern, kind in DATE_PHRASES:
        match = pattern.search(text)
        if match:
            raw = match.group(0)
            dates.append(ExtractedDate(raw=raw, normalized=extract_event_date(raw), type=kind))
    return dates


def _extract_amounts(text: str) -> List[ExtractedAmount]:
    amounts: List[ExtractedAmount] = []
    for pattern, default_unit in AMOUNT_PATTERNS:
        for match in pattern.finditer(text):
            try:
                value = float(match.group(1).replace(",", ""))
            except ValueError:
                continue
            suffix = (match.group(2) or "").lower()
            value *= MULTIPLIERS.get(suffix, 1.0)
            unit = CRYPTO_UNITS.get(suffix, default_unit)
            amounts.append(ExtractedAmount(raw=match.group(0).strip(), value=value, unit=unit))
    return amounts
