from __future__ import annotations

from collections import OrderedDict
from datetime import date, datetime, time, timezone
from typing import Dict, List, Optional

import yaml

from arbmatch.models import Market, Orderbook


def _optional_float(value, field_name: str, label: str) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid {field_name} for {label}: {value!r}") from exc


def _parse_datetime(value, label: str) -> Optional[datetime]:
    if value is None or value == "":
        return None
    # PyYAML already turns unquoted ISO timestamps into date/datetime objects.
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time())
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError as exc:
            raise ValueError(f"Invalid end_date for {label}: {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_orderbook(raw, label: str) -> Optional[Orderbook]:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid orderbook for {label}")
    bid = _optional_float(raw.get("yes_bid"), "yes_bid", label)
    ask = _optional_float(raw.get("yes_ask"), "yes_ask", label)
    if bid is None or ask is None:
        raise ValueError(f"Orderbook for {label} needs yes_bid and yes_ask")
    if not 0.0 <= bid <= ask <= 1.0:
        raise ValueError(f"Crossed or out-of-range orderbook for {label}: {bid} / {ask}")
    return Orderbook(yes_bid=bid, yes_ask=ask)


def _parse_market(raw, index: int) -> Market:
    if not isinstance(raw, dict):
        raise ValueError(f"Market entry {index} must be a mapping")
    platform = str(raw.get("platform") or "").strip().lower()
    market_id = str(raw.get("market_id") or raw.get("id") or "").strip()
    label = f"market {index} ({platform or '?'}:{market_id or '?'})"
    if not platform or not market_id:
        raise ValueError(f"platform and market_id are required for {label}")

    title = str(raw.get("title") or "")
    question = raw.get("question")
    if not title and not question:
        raise ValueError(f"title or question is required for {label}")

    yes_price = _optional_float(raw.get("yes_price"), "yes_price", label)
    if yes_price is None or not 0.0 <= yes_price <= 1.0:
        raise ValueError(f"yes_price must be within [0, 1] for {label}")

    return Market(
        platform=platform,
        market_id=market_id,
        title=title,
        question=str(question) if question else None,
        yes_price=yes_price,
        volume=_optional_float(raw.get("volume"), "volume", label) or 0.0,
        liquidity=_optional_float(raw.get("liquidity"), "liquidity", label),
        end_date=_parse_datetime(raw.get("end_date"), label),
        orderbook=_parse_orderbook(raw.get("orderbook"), label),
        url=str(raw.get("url") or ""),
    )


def load_snapshot(path: str) -> List[Market]:
    with open(path, "r", encoding="utf-8") as handle:
        try:
            raw = yaml.safe_load(handle)
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(raw, dict) or not isinstance(raw.get("markets"), list):
        raise ValueError(f"{path} must have a top-level 'markets' list")

    markets = [_parse_market(item, index) for index, item in enumerate(raw["markets"])]
    seen = set()
    for market in markets:
        key = (market.platform, market.market_id)
        if key in seen:
            raise ValueError(f"Duplicate market {market.platform}:{market.market_id} in {path}")
        seen.add(key)
    return markets


def group_by_platform(markets: List[Market]) -> Dict[str, List[Market]]:
    grouped: Dict[str, List[Market]] = OrderedDict()
    for market in markets:
        grouped.setdefault(market.platform, []).append(market)
    return grouped
