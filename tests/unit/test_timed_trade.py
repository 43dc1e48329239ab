"""Unit tests for timed-trade open, settlement and timer management."""

from datetime import timedelta
from decimal import Decimal

import pytest

from src.bk_common.datetime_utils import utc_now
from src.bk_common.enums import TradeResult
from src.bk_common.errors import (
    AlreadyDecidedError,
    InsufficientFundsError,
    InvalidTradeResultError,
    TimerInUseError,
    TimerUnavailableError,
)
from src.bk_ledger.domain.invariants import verify_conservation
from src.bk_timed_trade.application.service import default_label
from src.container import BrokerageCore

D = Decimal


class TestOpen:
    async def test_open_blocks_stake(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "1000")
        trade = await core.timed_trades.open("A1", D("100"), 5)
        assert trade.status == "PENDING"
        assert trade.profit_rate == D("0.80")
        assert trade.timer_label == "5 Minutes"
        account = await core.store.get_account("A1")
        assert account.blocked == D("100.00")

    async def test_disabled_timer(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "1000")
        await core.timed_trades.set_timer_enabled(5, False)
        with pytest.raises(TimerUnavailableError):
            await core.timed_trades.open("A1", D("100"), 5)

    async def test_unknown_timer(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "1000")
        with pytest.raises(TimerUnavailableError):
            await core.timed_trades.open("A1", D("100"), 7)

    async def test_stake_above_spendable(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "50")
        with pytest.raises(InsufficientFundsError):
            await core.timed_trades.open("A1", D("100"), 5)
        assert core.timed_trades.list_trades(account_id="A1") == []


class TestSettlement:
    @pytest.mark.parametrize(
        ("result", "balance", "profit"),
        [
            (TradeResult.WIN, "1080.00", "80.00"),
            (TradeResult.LOSE, "900.00", "0.00"),
            (TradeResult.DRAW, "1000.00", "0.00"),
        ],
    )
    async def test_result_effects(
        self, core: BrokerageCore, fund, result: TradeResult, balance: str, profit: str
    ) -> None:
        await fund(core.store, "A1", "1000")
        trade = await core.timed_trades.open("A1", D("100"), 1)

        settled = await core.timed_trades.set_result(trade.id, result, "admin-1")

        assert settled.status == result.value
        assert settled.profit_amount == D(profit)
        account = await core.store.get_account("A1")
        assert account.balance == D(balance)
        assert account.blocked == D("0.00")
        assert await verify_conservation(core.store.repo) == []

    async def test_rate_is_frozen_at_open(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "1000")
        trade = await core.timed_trades.open("A1", D("100"), 1)
        await core.timed_trades.update_settings(profit_rate=D("0.50"))

        settled = await core.timed_trades.set_result(trade.id, TradeResult.WIN)

        assert settled.profit_amount == D("80.00")

    async def test_pending_is_not_a_result(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "1000")
        trade = await core.timed_trades.open("A1", D("100"), 1)
        with pytest.raises(InvalidTradeResultError):
            await core.timed_trades.set_result(trade.id, TradeResult.PENDING)

    async def test_settles_once(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "1000")
        trade = await core.timed_trades.open("A1", D("100"), 1)
        await core.timed_trades.set_result(trade.id, TradeResult.WIN)
        with pytest.raises(AlreadyDecidedError):
            await core.timed_trades.set_result(trade.id, TradeResult.LOSE)
        assert (await core.store.get_account("A1")).balance == D("1080.00")

    async def test_overdue_trades_stay_pending(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "1000")
        trade = await core.timed_trades.open("A1", D("100"), 1)
        assert core.timed_trades.list_overdue() == []

        overdue = core.timed_trades.list_overdue(utc_now() + timedelta(minutes=2))

        assert [t.id for t in overdue] == [trade.id]
        assert overdue[0].status == "PENDING"


class TestTimers:
    def test_default_labels(self) -> None:
        assert default_label(1) == "1 Minute"
        assert default_label(15) == "15 Minutes"
        assert default_label(60) == "1 Hour"
        assert default_label(120) == "2 Hours"

    def test_seeded_from_settings(self, core: BrokerageCore) -> None:
        assert [t.duration_minutes for t in core.timed_trades.list_timers()] == [1, 5, 10, 15, 60]

    async def test_enabled_only(self, core: BrokerageCore) -> None:
        await core.timed_trades.set_timer_enabled(10, False)
        minutes = [t.duration_minutes for t in core.timed_trades.list_timers(enabled_only=True)]
        assert 10 not in minutes

    async def test_timer_with_pending_trade_cannot_be_removed(
        self, core: BrokerageCore, fund
    ) -> None:
        await fund(core.store, "A1", "1000")
        await core.timed_trades.open("A1", D("100"), 15)
        with pytest.raises(TimerInUseError):
            await core.timed_trades.remove_timer(15)
        await core.timed_trades.remove_timer(10)
        assert 10 not in [t.duration_minutes for t in core.timed_trades.list_timers()]
