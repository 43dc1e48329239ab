"""Pydantic schemas for timed trades, timers and trading settings."""

from decimal import Decimal

from pydantic import BaseModel, Field

from src.bk_common.enums import TradeResult
from src.bk_timed_trade.domain.models import TimedTrade, Timer, TradingSettings


class OpenTradeRequest(BaseModel):
    stake: Decimal = Field(..., gt=0, decimal_places=2)
    duration_minutes: int = Field(..., gt=0)


class SetResultRequest(BaseModel):
    result: TradeResult


class TimerRequest(BaseModel):
    duration_minutes: int = Field(..., gt=0, le=24 * 60)
    label: str | None = Field(None, max_length=50)
    is_enabled: bool = True


class TimerToggleRequest(BaseModel):
    is_enabled: bool


class TradingSettingsRequest(BaseModel):
    profit_rate: Decimal | None = Field(None, ge=0, le=10, description="Fraction, 0.80 = 80%")
    currency_code: str | None = Field(None, min_length=3, max_length=3)
    currency_symbol: str | None = Field(None, min_length=1, max_length=5)


class TimedTradeResponse(BaseModel):
    id: str
    account_id: str
    stake: Decimal
    duration_minutes: int
    timer_label: str
    profit_rate: Decimal
    status: str
    profit_amount: Decimal
    opened_at: str
    expires_at: str
    decided_at: str | None
    decided_by: str | None

    @classmethod
    def from_trade(cls, t: TimedTrade) -> "TimedTradeResponse":
        return cls(
            id=t.id,
            account_id=t.account_id,
            stake=t.stake,
            duration_minutes=t.duration_minutes,
            timer_label=t.timer_label,
            profit_rate=t.profit_rate,
            status=t.status.value,
            profit_amount=t.profit_amount,
            opened_at=t.opened_at.isoformat(),
            expires_at=t.expires_at.isoformat(),
            decided_at=t.decided_at.isoformat() if t.decided_at else None,
            decided_by=t.decided_by,
        )


class TimerResponse(BaseModel):
    duration_minutes: int
    label: str
    is_enabled: bool

    @classmethod
    def from_timer(cls, t: Timer) -> "TimerResponse":
        return cls(duration_minutes=t.duration_minutes, label=t.label, is_enabled=t.is_enabled)


class TradingSettingsResponse(BaseModel):
    profit_rate: Decimal
    currency_code: str
    currency_symbol: str

    @classmethod
    def from_settings(cls, s: TradingSettings) -> "TradingSettingsResponse":
        return cls(
            profit_rate=s.profit_rate,
            currency_code=s.currency_code,
            currency_symbol=s.currency_symbol,
        )
