from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from arbmatch.models import ValidatedArbitrageOpportunity, ValidatedMarketPair

logger = logging.getLogger(__name__)

ACTIVE = "active"
CLOSED = "closed"


@dataclass
class PricePoint:
    timestamp: datetime
    price_a: float
    price_b: float
    profit_pct: float


@dataclass
class TrackedOpportunity:
    key: str
    pair: ValidatedMarketPair
    first_seen: datetime
    last_seen: datetime
    peak_profit_pct: float
    current_profit_pct: float
    status: str = ACTIVE
    price_history: List[PricePoint] = field(default_factory=list)
    last_alert: Optional[datetime] = None
    last_alert_profit_pct: float = 0.0


def pair_key(pair: ValidatedMarketPair) -> str:
    return (
        f"{pair.market_a.platform}:{pair.market_a.market_id}|"
        f"{pair.market_b.platform}:{pair.market_b.market_id}"
    )


class OpportunityTracker:
    """Follows opportunities across repeated scans.

    A pair stays active while every scan still finds it, and is closed the first
    scan it is missing. ``observe`` returns the opportunities worth alerting on:
    new ones, ones whose margin grew by ``margin_step_resend`` since the last
    alert, and ones whose last alert is older than ``dedupe_seconds``.
    """

    def __init__(
        self,
        dedupe_seconds: int = 300,
        margin_step_resend: float = 0.01,
        history_limit: int = 100,
    ) -> None:
        self.dedupe_seconds = dedupe_seconds
        self.margin_step_resend = margin_step_resend
        self.history_limit = history_limit
        self._active: Dict[str, TrackedOpportunity] = {}
        self._history: List[TrackedOpportunity] = []
        self.scan_count = 0
        self.alerts_sent = 0

    def observe(
        self, opportunities: Iterable[ValidatedArbitrageOpportunity], now: datetime
    ) -> List[TrackedOpportunity]:
        self.scan_count += 1
        seen: Dict[str, TrackedOpportunity] = {}
        to_alert: List[TrackedOpportunity] = []

        for opp in opportunities:
            key = pair_key(opp.pair)
            tracked = self._active.get(key)
            if tracked is None:
                tracked = TrackedOpportunity(
                    key=key,
                    pair=opp.pair,
                    first_seen=now,
                    last_seen=now,
                    peak_profit_pct=opp.net_profit_pct,
                    current_profit_pct=opp.net_profit_pct,
                )
                self._active[key] = tracked
                logger.info("New opportunity %s net=%.2f%%", key, opp.net_profit_pct * 100)

            tracked.last_seen = now
            tracked.current_profit_pct = opp.net_profit_pct
            tracked.peak_profit_pct = max(tracked.peak_profit_pct, opp.net_profit_pct)
            tracked.price_history.append(
                PricePoint(
                    timestamp=now,
                    price_a=opp.pair.market_a.yes_price,
                    price_b=opp.pair.market_b.yes_price,
                    profit_pct=opp.net_profit_pct,
                )
            )
            seen[key] = tracked

            if self._should_alert(tracked, now):
                tracked.last_alert = now
                tracked.last_alert_profit_pct = tracked.current_profit_pct
                self.alerts_sent += 1
                to_alert.append(tracked)

        for key in [key for key in self._active if key not in seen]:
            self._close(key)

        return to_alert

    def _should_alert(self, tracked: TrackedOpportunity, now: datetime) -> bool:
        if tracked.last_alert is None:
            return True
        if now - tracked.last_alert >= timedelta(seconds=self.dedupe_seconds):
            return True
        return tracked.current_profit_pct - tracked.last_alert_profit_pct >= self.margin_step_resend

    def _close(self, key: str) -> None:
        tracked = self._active.pop(key)
        tracked.status = CLOSED
        tracked.current_profit_pct = 0.0
        self._history.insert(0, tracked)
        del self._history[self.history_limit :]
        logger.info("Opportunity closed %s peak=%.2f%%", key, tracked.peak_profit_pct * 100)

    def active(self) -> List[TrackedOpportunity]:
        return sorted(self._active.values(), key=lambda item: -item.current_profit_pct)

    def history(self) -> List[TrackedOpportunity]:
        return list(self._history)
