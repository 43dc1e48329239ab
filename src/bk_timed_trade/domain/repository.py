"""Repository Protocol for timed trades, timers and trading settings."""

from typing import Protocol

from src.bk_common.enums import TradeResult
from src.bk_timed_trade.domain.models import TimedTrade, Timer, TradingSettings


class TimedTradeRepositoryProtocol(Protocol):
    def get(self, trade_id: str) -> TimedTrade | None: ...

    def save(self, trade: TimedTrade) -> None: ...

    def list_trades(
        self, account_id: str | None = None, status: TradeResult | None = None
    ) -> list[TimedTrade]: ...

    def get_timer(self, duration_minutes: int) -> Timer | None: ...

    def save_timer(self, timer: Timer) -> None: ...

    def delete_timer(self, duration_minutes: int) -> None: ...

    def list_timers(self) -> list[Timer]: ...

    def get_settings(self) -> TradingSettings: ...

    def save_settings(self, settings: TradingSettings) -> None: ...
