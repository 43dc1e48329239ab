"""Ledger effects of a timed-trade result.

    WIN   release stake, credit stake * profit_rate     (stake kept + profit)
    LOSE  release stake, debit stake                    (stake consumed)
    DRAW  release stake                                 (no net change)

Every entry is correlated with the trade id, so a replay cannot apply a
second settlement.
"""

from decimal import Decimal

from src.bk_common.enums import LedgerEntryKind, TradeResult
from src.bk_common.errors import InvalidTradeResultError
from src.bk_common.money import ZERO, quantize
from src.bk_ledger.domain.store import LedgerTransaction
from src.bk_timed_trade.domain.models import TimedTrade


def profit_for(trade: TimedTrade) -> Decimal:
    return quantize(trade.stake * trade.profit_rate)


async def apply_result(
    txn: LedgerTransaction, trade: TimedTrade, result: TradeResult
) -> Decimal:
    """Stage the settlement entries in ``txn``. Returns the profit credited."""
    if result == TradeResult.PENDING:
        raise InvalidTradeResultError(result.value)

    await txn.release(
        trade.stake, LedgerEntryKind.TRADE_RELEASE, trade.id, f"Timed trade {result.value}"
    )
    if result == TradeResult.WIN:
        profit = profit_for(trade)
        if profit > ZERO:
            await txn.credit(profit, LedgerEntryKind.TRADE_CREDIT, trade.id, "Timed trade profit")
        return profit
    if result == TradeResult.LOSE:
        await txn.debit(
            trade.stake, LedgerEntryKind.TRADE_DEBIT, trade.id, "Timed trade stake lost"
        )
    return ZERO
