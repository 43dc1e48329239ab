"""Domain models for bk_position: pure dataclasses."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.bk_common.enums import OrderSide
from src.bk_common.money import ZERO


@dataclass(frozen=True)
class Position:
    account_id: str
    symbol: str
    quantity: int = 0
    avg_cost: Decimal = ZERO         # per share, quantized like prices
    realized_pnl: Decimal = ZERO     # accumulated over every sell
    updated_at: datetime | None = None

    @property
    def invested(self) -> Decimal:
        return self.avg_cost * self.quantity


@dataclass(frozen=True)
class Execution:
    order_id: str
    account_id: str
    side: OrderSide
    symbol: str
    quantity: int
    price: Decimal
    amount: Decimal                  # cash moved, always positive
    executed_at: datetime
    realized_pnl: Decimal | None = None


@dataclass(frozen=True)
class RealizedPnl:
    id: str
    account_id: str
    symbol: str
    order_id: str
    quantity: int
    buy_price: Decimal               # average cost at the time of the sell
    sell_price: Decimal
    pnl: Decimal                     # may be negative or zero
    executed_at: datetime
