"""Domain models for bk_timed_trade: pure dataclasses."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.bk_common.enums import TradeResult
from src.bk_common.money import ZERO


@dataclass(frozen=True)
class TimedTrade:
    id: str
    account_id: str
    stake: Decimal                   # blocked at open
    duration_minutes: int
    timer_label: str
    profit_rate: Decimal             # fraction, frozen at open (0.80 = 80%)
    status: TradeResult
    opened_at: datetime
    expires_at: datetime
    profit_amount: Decimal = ZERO
    decided_at: datetime | None = None
    decided_by: str | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == TradeResult.PENDING

    def is_overdue(self, now: datetime) -> bool:
        return self.is_pending and now >= self.expires_at


@dataclass
class Timer:
    duration_minutes: int
    label: str
    is_enabled: bool = True


@dataclass
class TradingSettings:
    profit_rate: Decimal
    currency_code: str
    currency_symbol: str
