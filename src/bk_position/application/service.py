"""PositionService: trade execution, IPO share allotment, portfolio view.

Cash moves through the LedgerStore; the position update and execution
record are persisted with the same ledger transaction, so a failed debit
leaves the position untouched and a committed debit is never observed
without its position change.

Order ids come from the caller and are only unique per account. The
ledger sees them as ``ORD:<order_id>`` so they can never match the
correlation id of a request, IPO application or timed trade.
"""

import logging
from collections.abc import Callable
from decimal import Decimal

from src.bk_common.datetime_utils import utc_now
from src.bk_common.enums import LedgerEntryKind, OrderSide
from src.bk_common.id_generator import generate_id
from src.bk_common.money import ZERO, quantize, require_positive, require_quantity
from src.bk_ledger.domain.records import RecordCodec
from src.bk_ledger.domain.store import LedgerStore, LedgerTransaction
from src.bk_position.application.schemas import (
    ExecutionResponse,
    PortfolioSummary,
    PortfolioTotals,
    PositionItem,
    RealizedPnlItem,
)
from src.bk_position.domain.accounting import apply_buy, apply_sell
from src.bk_position.domain.models import Execution, Position, RealizedPnl
from src.bk_position.domain.repository import PositionRepositoryProtocol

logger = logging.getLogger(__name__)

PriceLookup = Callable[[str], Decimal | None]

POSITION_RECORDS = RecordCodec(
    "position",
    Position,
    key=lambda p: f"{p.account_id}:{p.symbol}",
    owner=lambda p: p.account_id,
)
EXECUTION_RECORDS = RecordCodec(
    "execution",
    Execution,
    key=lambda e: f"{e.account_id}:{e.order_id}",
    owner=lambda e: e.account_id,
)
REALIZED_RECORDS = RecordCodec(
    "realized_pnl", RealizedPnl, key=lambda r: r.id, owner=lambda r: r.account_id
)


def normalize_symbol(symbol: str) -> str:
    return symbol.strip().upper()


def order_correlation_id(order_id: str) -> str:
    return f"ORD:{order_id}"


class PositionService:
    def __init__(
        self,
        store: LedgerStore,
        repo: PositionRepositoryProtocol,
        price_lookup: PriceLookup | None = None,
    ) -> None:
        self._store = store
        self._repo = repo
        self._price_lookup = price_lookup

    async def execute_order(
        self,
        account_id: str,
        side: OrderSide,
        symbol: str,
        quantity: int,
        price: Decimal,
        order_id: str | None = None,
    ) -> ExecutionResponse:
        order_id = order_id or generate_id("ORD")
        if side == OrderSide.BUY:
            execution = await self.on_buy(account_id, symbol, quantity, price, order_id)
        else:
            execution = await self.on_sell(account_id, symbol, quantity, price, order_id)
        return ExecutionResponse.from_execution(execution)

    async def on_buy(
        self,
        account_id: str,
        symbol: str,
        quantity: int,
        price: Decimal,
        order_id: str,
    ) -> Execution:
        symbol = normalize_symbol(symbol)
        quantity = require_quantity(quantity)
        price = require_positive(price, "price")
        cost = quantize(price * quantity)

        async with self._store.transaction(account_id) as txn:
            replayed = self._replayed(account_id, order_id)
            if replayed is not None:
                return replayed
            txn.require_enabled()
            position = self._repo.get(account_id, symbol) or Position(account_id, symbol)
            await txn.debit(
                cost,
                LedgerEntryKind.TRADE_DEBIT,
                order_correlation_id(order_id),
                f"Buy {quantity} {symbol} @ {price}",
            )
            updated = apply_buy(position, quantity, price)
            execution = Execution(
                order_id=order_id,
                account_id=account_id,
                side=OrderSide.BUY,
                symbol=symbol,
                quantity=quantity,
                price=price,
                amount=cost,
                executed_at=utc_now(),
            )
            self._stage(txn, updated, execution)

        logger.info(
            "BUY %s %d %s @ %s: qty=%d avg=%s",
            account_id, quantity, symbol, price, updated.quantity, updated.avg_cost,
        )
        return execution

    async def on_sell(
        self,
        account_id: str,
        symbol: str,
        quantity: int,
        price: Decimal,
        order_id: str,
    ) -> Execution:
        symbol = normalize_symbol(symbol)
        quantity = require_quantity(quantity)
        price = require_positive(price, "price")
        proceeds = quantize(price * quantity)

        async with self._store.transaction(account_id) as txn:
            replayed = self._replayed(account_id, order_id)
            if replayed is not None:
                return replayed
            txn.require_enabled()
            position = self._repo.get(account_id, symbol) or Position(account_id, symbol)
            updated, realized = apply_sell(position, quantity, price)
            await txn.credit(
                proceeds,
                LedgerEntryKind.TRADE_CREDIT,
                order_correlation_id(order_id),
                f"Sell {quantity} {symbol} @ {price}",
            )
            now = utc_now()
            execution = Execution(
                order_id=order_id,
                account_id=account_id,
                side=OrderSide.SELL,
                symbol=symbol,
                quantity=quantity,
                price=price,
                amount=proceeds,
                executed_at=now,
                realized_pnl=realized,
            )
            record = RealizedPnl(
                id=generate_id("PNL"),
                account_id=account_id,
                symbol=symbol,
                order_id=order_id,
                quantity=quantity,
                buy_price=position.avg_cost,
                sell_price=price,
                pnl=realized,
                executed_at=now,
            )
            self._stage(txn, updated, execution, record)

        logger.info(
            "SELL %s %d %s @ %s: realized=%s remaining=%d",
            account_id, quantity, symbol, price, realized, updated.quantity,
        )
        return execution

    def stage_allotment(
        self,
        txn: LedgerTransaction,
        symbol: str,
        quantity: int,
        price: Decimal,
    ) -> Position:
        """Add allotted IPO shares at ``price`` without a second cash debit.

        The caller has already consumed the cash inside ``txn``; the share
        credit becomes visible when ``txn`` commits.
        """
        symbol = normalize_symbol(symbol)
        account_id = txn.account.id
        position = self._repo.get(account_id, symbol) or Position(account_id, symbol)
        updated = apply_buy(position, require_quantity(quantity), price)
        txn.persist(POSITION_RECORDS.encode(updated), lambda: self._repo.save(updated))
        return updated

    async def restore(self) -> None:
        for record in await self._store.load_records(POSITION_RECORDS.record_type):
            self._repo.save(POSITION_RECORDS.decode(record))
        for record in await self._store.load_records(EXECUTION_RECORDS.record_type):
            self._repo.save_execution(EXECUTION_RECORDS.decode(record))
        for record in await self._store.load_records(REALIZED_RECORDS.record_type):
            self._repo.add_realized(REALIZED_RECORDS.decode(record))

    # ------------------------------------------------------------------
    # Read-only projections
    # ------------------------------------------------------------------

    def list_positions(self, account_id: str) -> list[Position]:
        return [p for p in self._repo.list_for(account_id) if p.quantity > 0]

    def list_executions(self, account_id: str) -> list[ExecutionResponse]:
        return [ExecutionResponse.from_execution(e) for e in self._repo.list_executions(account_id)]

    async def portfolio_summary(self, account_id: str) -> PortfolioSummary:
        await self._store.get_account(account_id)
        items = [self._value(p) for p in self.list_positions(account_id)]
        realized = self._repo.list_realized(account_id)

        total_invested = sum((i.invested for i in items), ZERO)
        total_current = sum((i.current_value for i in items), ZERO)
        unrealized = sum((i.unrealized_pnl for i in items), ZERO)
        realized_total = sum((r.pnl for r in realized), ZERO)
        return PortfolioSummary(
            account_id=account_id,
            positions=items,
            realized_pnl=[RealizedPnlItem.from_record(r) for r in realized],
            totals=PortfolioTotals(
                total_invested=total_invested,
                total_current_value=total_current,
                unrealized_pnl=unrealized,
                realized_pnl=realized_total,
                total_pnl=unrealized + realized_total,
                positions_count=len(items),
            ),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _replayed(self, account_id: str, order_id: str) -> Execution | None:
        existing = self._repo.get_execution(account_id, order_id)
        if existing is not None:
            logger.debug(
                "Order %s already executed for %s, returning stored execution",
                order_id, account_id,
            )
        return existing

    def _stage(
        self,
        txn: LedgerTransaction,
        position: Position,
        execution: Execution,
        realized: RealizedPnl | None = None,
    ) -> None:
        txn.persist(POSITION_RECORDS.encode(position), lambda: self._repo.save(position))
        txn.persist(
            EXECUTION_RECORDS.encode(execution), lambda: self._repo.save_execution(execution)
        )
        if realized is not None:
            txn.persist(
                REALIZED_RECORDS.encode(realized), lambda: self._repo.add_realized(realized)
            )

    def _ltp(self, position: Position) -> Decimal:
        ltp = self._price_lookup(position.symbol) if self._price_lookup else None
        return ltp if ltp is not None else position.avg_cost

    def _value(self, p: Position) -> PositionItem:
        ltp = self._ltp(p)
        invested = quantize(p.invested)
        current = quantize(ltp * p.quantity)
        pnl = current - invested
        pct = quantize(pnl / invested * 100) if invested > 0 else ZERO
        return PositionItem(
            symbol=p.symbol,
            quantity=p.quantity,
            avg_cost=p.avg_cost,
            ltp=ltp,
            invested=invested,
            current_value=current,
            unrealized_pnl=pnl,
            unrealized_pnl_percent=pct,
            realized_pnl=p.realized_pnl,
        )
