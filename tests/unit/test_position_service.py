"""Unit tests for PositionService: cash and holdings move together."""

from decimal import Decimal

import pytest

from src.bk_common.enums import LedgerEntryKind, OrderSide, TradeResult
from src.bk_common.errors import InsufficientFundsError, InsufficientPositionError
from src.bk_ledger.domain.invariants import verify_conservation
from src.container import BrokerageCore

D = Decimal


class TestBuy:
    async def test_buy_debits_cost_and_adds_shares(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "5000")
        resp = await core.positions.execute_order(
            "A1", OrderSide.BUY, "acme", 10, D("100.00"), "ORD-1"
        )
        assert resp.symbol == "ACME"
        assert resp.amount == D("1000.00")
        assert (await core.store.get_account("A1")).balance == D("4000.00")
        [position] = core.positions.list_positions("A1")
        assert position.quantity == 10
        assert position.avg_cost == D("100.00")

    async def test_insufficient_cash_leaves_position_untouched(
        self, core: BrokerageCore, fund
    ) -> None:
        await fund(core.store, "A1", "500")
        with pytest.raises(InsufficientFundsError):
            await core.positions.execute_order("A1", OrderSide.BUY, "ACME", 10, D("100.00"))
        assert core.positions.list_positions("A1") == []
        assert core.positions.list_executions("A1") == []

    async def test_replayed_order_applies_once(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "5000")
        for _ in range(2):
            await core.positions.execute_order(
                "A1", OrderSide.BUY, "ACME", 10, D("100.00"), "ORD-1"
            )
        assert (await core.store.get_account("A1")).balance == D("4000.00")
        assert core.positions.list_positions("A1")[0].quantity == 10


class TestSell:
    async def test_sell_credits_proceeds_and_realizes(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "5000")
        await core.positions.execute_order("A1", OrderSide.BUY, "ACME", 10, D("100.00"))
        await core.positions.execute_order("A1", OrderSide.BUY, "ACME", 10, D("200.00"))

        resp = await core.positions.execute_order("A1", OrderSide.SELL, "ACME", 5, D("180.00"))

        assert resp.realized_pnl == D("150.00")
        account = await core.store.get_account("A1")
        assert account.balance == D("5000.00") - D("3000.00") + D("900.00")
        position = core.positions.list_positions("A1")[0]
        assert position.quantity == 15
        assert position.avg_cost == D("150.00")
        assert await verify_conservation(core.store.repo) == []

    async def test_oversell_leaves_cash_untouched(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "1000")
        with pytest.raises(InsufficientPositionError):
            await core.positions.execute_order("A1", OrderSide.SELL, "ACME", 1, D("10.00"))
        account = await core.store.get_account("A1")
        assert account.balance == D("1000.00")
        assert account.entry_seq == 1


class TestPortfolio:
    async def test_summary_uses_ltp_when_known(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "10000")
        await core.positions.execute_order("A1", OrderSide.BUY, "ACME", 10, D("100.00"))
        await core.positions.execute_order("A1", OrderSide.BUY, "BETA", 5, D("50.00"))
        core.prices.set_price("ACME", D("120.00"))

        summary = await core.positions.portfolio_summary("A1")

        by_symbol = {p.symbol: p for p in summary.positions}
        assert by_symbol["ACME"].unrealized_pnl == D("200.00")
        assert by_symbol["ACME"].unrealized_pnl_percent == D("20.00")
        # No price for BETA: valued at cost.
        assert by_symbol["BETA"].ltp == D("50.00")
        assert by_symbol["BETA"].unrealized_pnl == D("0.00")
        assert summary.totals.total_invested == D("1250.00")
        assert summary.totals.positions_count == 2

    async def test_closed_positions_drop_out_but_pnl_remains(
        self, core: BrokerageCore, fund
    ) -> None:
        await fund(core.store, "A1", "10000")
        await core.positions.execute_order("A1", OrderSide.BUY, "ACME", 10, D("100.00"))
        await core.positions.execute_order("A1", OrderSide.SELL, "ACME", 10, D("110.00"))

        summary = await core.positions.portfolio_summary("A1")

        assert summary.positions == []
        assert summary.totals.realized_pnl == D("100.00")
        assert summary.totals.total_pnl == D("100.00")
        assert len(summary.realized_pnl) == 1


class TestOrderIdIsolation:
    async def test_buy_reusing_a_lost_trade_id_still_pays(
        self, core: BrokerageCore, fund
    ) -> None:
        await fund(core.store, "A1", "1000")
        trade = await core.timed_trades.open("A1", D("100"), 1)
        await core.timed_trades.set_result(trade.id, TradeResult.LOSE)
        before = (await core.store.get_account("A1")).balance

        await core.positions.execute_order("A1", OrderSide.BUY, "ACME", 5, D("100.00"), trade.id)

        assert before == D("900.00")
        assert (await core.store.get_account("A1")).balance == before - D("500.00")
        assert core.positions.list_positions("A1")[0].quantity == 5
        assert await verify_conservation(core.store.repo) == []

    async def test_sell_reusing_a_won_trade_id_still_credits(
        self, core: BrokerageCore, fund
    ) -> None:
        await fund(core.store, "A1", "1000")
        await core.positions.execute_order("A1", OrderSide.BUY, "ACME", 5, D("100.00"))
        trade = await core.timed_trades.open("A1", D("100"), 1)
        await core.timed_trades.set_result(trade.id, TradeResult.WIN)
        before = (await core.store.get_account("A1")).balance

        await core.positions.execute_order("A1", OrderSide.SELL, "ACME", 5, D("120.00"), trade.id)

        assert (await core.store.get_account("A1")).balance == before + D("600.00")
        assert core.positions.list_positions("A1") == []

    async def test_order_entries_are_namespaced(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "1000")
        await core.positions.execute_order("A1", OrderSide.BUY, "ACME", 1, D("10.00"), "X-1")
        entry = await core.store.repo.find_entry(
            "A1", "ORD:X-1", LedgerEntryKind.TRADE_DEBIT.value
        )
        assert entry is not None
        assert entry.amount == D("-10.00")

    async def test_same_order_id_on_two_accounts_executes_twice(
        self, core: BrokerageCore, fund
    ) -> None:
        await fund(core.store, "A1", "1000")
        await fund(core.store, "B1", "1000")
        first = await core.positions.execute_order(
            "A1", OrderSide.BUY, "ACME", 2, D("100.00"), "ORD-X"
        )
        second = await core.positions.execute_order(
            "B1", OrderSide.BUY, "ACME", 3, D("100.00"), "ORD-X"
        )

        assert first.account_id == "A1"
        assert second.account_id == "B1"
        assert second.quantity == 3
        assert (await core.store.get_account("B1")).balance == D("700.00")
        assert core.positions.list_positions("B1")[0].quantity == 3
        assert [e.quantity for e in core.positions.list_executions("A1")] == [2]
