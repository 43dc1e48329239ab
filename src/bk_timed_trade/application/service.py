"""TimedTradeService: open, manual settlement, timers and trading settings.

Trades never settle on their own. Once expired they stay PENDING until an
admin sets the result; ``list_overdue`` surfaces them for attention.
"""

import logging
from dataclasses import replace
from datetime import datetime
from decimal import Decimal

from src.bk_common.datetime_utils import minutes_after, utc_now
from src.bk_common.enums import LedgerEntryKind, NotificationCategory, TradeResult
from src.bk_common.errors import (
    AlreadyDecidedError,
    TimerInUseError,
    TimerUnavailableError,
    TradeNotFoundError,
)
from src.bk_common.id_generator import generate_id
from src.bk_common.money import money_to_display, require_positive
from src.bk_ledger.domain.records import RecordCodec
from src.bk_ledger.domain.store import LedgerStore
from src.bk_notify.domain.emitter import NotificationEmitter
from src.bk_timed_trade.application.schemas import (
    TimedTradeResponse,
    TimerResponse,
    TradingSettingsResponse,
)
from src.bk_timed_trade.domain.models import TimedTrade, Timer, TradingSettings
from src.bk_timed_trade.domain.repository import TimedTradeRepositoryProtocol
from src.bk_timed_trade.domain.settlement import apply_result

logger = logging.getLogger(__name__)

TRADE_RECORDS = RecordCodec(
    "timed_trade", TimedTrade, key=lambda t: t.id, owner=lambda t: t.account_id
)
TIMER_RECORDS = RecordCodec("timer", Timer, key=lambda t: str(t.duration_minutes))
SETTINGS_RECORDS = RecordCodec("trading_settings", TradingSettings, key=lambda _: "current")


def default_label(minutes: int) -> str:
    if minutes % 60 == 0:
        hours = minutes // 60
        return f"{hours} Hour" if hours == 1 else f"{hours} Hours"
    return f"{minutes} Minute" if minutes == 1 else f"{minutes} Minutes"


class TimedTradeService:
    def __init__(
        self,
        store: LedgerStore,
        repo: TimedTradeRepositoryProtocol,
        emitter: NotificationEmitter,
    ) -> None:
        self._store = store
        self._repo = repo
        self._emitter = emitter

    async def restore(self) -> None:
        """Reload trades, timers and settings.

        The first start against an empty store writes the configured default
        timers, so later admin edits and removals survive a restart.
        """
        for record in await self._store.load_records(SETTINGS_RECORDS.record_type):
            self._repo.save_settings(SETTINGS_RECORDS.decode(record))
        stored_timers = await self._store.load_records(TIMER_RECORDS.record_type)
        if stored_timers:
            for timer in self._repo.list_timers():
                self._repo.delete_timer(timer.duration_minutes)
            for record in stored_timers:
                self._repo.save_timer(TIMER_RECORDS.decode(record))
        else:
            for timer in self._repo.list_timers():
                await self._store.save_record(TIMER_RECORDS.encode(timer))
        pending = 0
        for record in await self._store.load_records(TRADE_RECORDS.record_type):
            trade = TRADE_RECORDS.decode(record)
            self._repo.save(trade)
            pending += trade.is_pending
        logger.info("Timed trades restored: %d pending", pending)

    async def open(
        self, account_id: str, stake: Decimal, duration_minutes: int
    ) -> TimedTradeResponse:
        stake = require_positive(stake, "stake")
        timer = self._repo.get_timer(duration_minutes)
        if timer is None or not timer.is_enabled:
            raise TimerUnavailableError(duration_minutes)
        now = utc_now()
        trade = TimedTrade(
            id=generate_id("TRD"),
            account_id=account_id,
            stake=stake,
            duration_minutes=duration_minutes,
            timer_label=timer.label,
            profit_rate=self._repo.get_settings().profit_rate,
            status=TradeResult.PENDING,
            opened_at=now,
            expires_at=minutes_after(now, duration_minutes),
        )
        async with self._store.transaction(account_id) as txn:
            txn.require_enabled()
            await txn.block(
                stake, LedgerEntryKind.TRADE_BLOCK, trade.id, f"Timed trade {timer.label}"
            )
            txn.persist(TRADE_RECORDS.encode(trade), lambda: self._repo.save(trade))

        logger.info(
            "Timed trade opened: %s account=%s stake=%s rate=%s expires=%s",
            trade.id, account_id, stake, trade.profit_rate, trade.expires_at.isoformat(),
        )
        return TimedTradeResponse.from_trade(trade)

    async def set_result(
        self, trade_id: str, result: TradeResult, decided_by: str | None = None
    ) -> TimedTradeResponse:
        trade = self._get(trade_id)
        async with self._store.transaction(trade.account_id) as txn:
            current = self._get(trade_id)
            if not current.is_pending:
                raise AlreadyDecidedError(trade_id, current.status.value)
            profit = await apply_result(txn, current, result)
            settled = replace(
                current,
                status=result,
                profit_amount=profit,
                decided_at=utc_now(),
                decided_by=decided_by or "ADMIN",
            )
            txn.persist(TRADE_RECORDS.encode(settled), lambda: self._repo.save(settled))

        logger.info(
            "Timed trade settled: %s %s profit=%s (by %s)",
            trade_id, result.value, profit, settled.decided_by,
        )
        await self._emitter.emit(
            settled.account_id,
            NotificationCategory.WALLET_UPDATES,
            f"Trade {result.value.lower()}",
            _result_message(settled),
        )
        return TimedTradeResponse.from_trade(settled)

    def get_trade(self, trade_id: str) -> TimedTradeResponse:
        return TimedTradeResponse.from_trade(self._get(trade_id))

    def list_trades(
        self, account_id: str | None = None, status: TradeResult | None = None
    ) -> list[TimedTradeResponse]:
        return [
            TimedTradeResponse.from_trade(t) for t in self._repo.list_trades(account_id, status)
        ]

    def list_overdue(self, now: datetime | None = None) -> list[TimedTradeResponse]:
        now = now or utc_now()
        return [
            TimedTradeResponse.from_trade(t)
            for t in self._repo.list_trades(status=TradeResult.PENDING)
            if t.is_overdue(now)
        ]

    # ------------------------------------------------------------------
    # Timers (admin)
    # ------------------------------------------------------------------

    def list_timers(self, enabled_only: bool = False) -> list[TimerResponse]:
        return [
            TimerResponse.from_timer(t)
            for t in self._repo.list_timers()
            if t.is_enabled or not enabled_only
        ]

    async def add_timer(
        self, duration_minutes: int, label: str | None = None, is_enabled: bool = True
    ) -> TimerResponse:
        timer = Timer(duration_minutes, label or default_label(duration_minutes), is_enabled)
        await self._save_timer(timer)
        logger.info("Timer saved: %dmin (%s) enabled=%s", duration_minutes, timer.label, is_enabled)
        return TimerResponse.from_timer(timer)

    async def set_timer_enabled(self, duration_minutes: int, is_enabled: bool) -> TimerResponse:
        timer = self._repo.get_timer(duration_minutes)
        if timer is None:
            raise TimerUnavailableError(duration_minutes)
        timer = replace(timer, is_enabled=is_enabled)
        await self._save_timer(timer)
        return TimerResponse.from_timer(timer)

    async def remove_timer(self, duration_minutes: int) -> None:
        if self._repo.get_timer(duration_minutes) is None:
            raise TimerUnavailableError(duration_minutes)
        in_use = any(
            t.duration_minutes == duration_minutes
            for t in self._repo.list_trades(status=TradeResult.PENDING)
        )
        if in_use:
            raise TimerInUseError(duration_minutes)
        await self._store.delete_record(TIMER_RECORDS.record_type, str(duration_minutes))
        self._repo.delete_timer(duration_minutes)
        logger.info("Timer removed: %dmin", duration_minutes)

    # ------------------------------------------------------------------
    # Trading settings (admin)
    # ------------------------------------------------------------------

    def get_settings(self) -> TradingSettingsResponse:
        return TradingSettingsResponse.from_settings(self._repo.get_settings())

    async def update_settings(
        self,
        profit_rate: Decimal | None = None,
        currency_code: str | None = None,
        currency_symbol: str | None = None,
    ) -> TradingSettingsResponse:
        current = self._repo.get_settings()
        updated = replace(
            current,
            profit_rate=profit_rate if profit_rate is not None else current.profit_rate,
            currency_code=currency_code or current.currency_code,
            currency_symbol=currency_symbol or current.currency_symbol,
        )
        await self._store.save_record(SETTINGS_RECORDS.encode(updated))
        self._repo.save_settings(updated)
        logger.info("Trading settings updated: profit_rate=%s", updated.profit_rate)
        return TradingSettingsResponse.from_settings(updated)

    async def _save_timer(self, timer: Timer) -> None:
        await self._store.save_record(TIMER_RECORDS.encode(timer))
        self._repo.save_timer(timer)

    def _get(self, trade_id: str) -> TimedTrade:
        trade = self._repo.get(trade_id)
        if trade is None:
            raise TradeNotFoundError(trade_id)
        return trade


def _result_message(trade: TimedTrade) -> str:
    stake = money_to_display(trade.stake)
    if trade.status == TradeResult.WIN:
        return f"You won {money_to_display(trade.profit_amount)} on your {stake} trade."
    if trade.status == TradeResult.LOSE:
        return f"Your {stake} trade was lost."
    return f"Your {stake} trade ended in a draw. The stake has been released."
