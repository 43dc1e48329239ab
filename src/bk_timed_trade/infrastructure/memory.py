"""In-memory timed-trade store."""

from src.bk_common.enums import TradeResult
from src.bk_timed_trade.domain.models import TimedTrade, Timer, TradingSettings


class InMemoryTimedTradeRepository:
    def __init__(self, settings: TradingSettings, timers: list[Timer] | None = None) -> None:
        self._trades: dict[str, TimedTrade] = {}
        self._timers: dict[int, Timer] = {t.duration_minutes: t for t in timers or []}
        self._settings = settings

    def get(self, trade_id: str) -> TimedTrade | None:
        return self._trades.get(trade_id)

    def save(self, trade: TimedTrade) -> None:
        self._trades[trade.id] = trade

    def list_trades(
        self, account_id: str | None = None, status: TradeResult | None = None
    ) -> list[TimedTrade]:
        items = [
            t
            for t in self._trades.values()
            if (account_id is None or t.account_id == account_id)
            and (status is None or t.status == status)
        ]
        return sorted(items, key=lambda t: t.opened_at, reverse=True)

    def get_timer(self, duration_minutes: int) -> Timer | None:
        return self._timers.get(duration_minutes)

    def save_timer(self, timer: Timer) -> None:
        self._timers[timer.duration_minutes] = timer

    def delete_timer(self, duration_minutes: int) -> None:
        self._timers.pop(duration_minutes, None)

    def list_timers(self) -> list[Timer]:
        return sorted(self._timers.values(), key=lambda t: t.duration_minutes)

    def get_settings(self) -> TradingSettings:
        return self._settings

    def save_settings(self, settings: TradingSettings) -> None:
        self._settings = settings
