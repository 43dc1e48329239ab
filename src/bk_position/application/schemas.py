"""Pydantic schemas for orders, positions and the portfolio summary."""

from decimal import Decimal

from pydantic import BaseModel, Field

from src.bk_common.enums import OrderSide
from src.bk_position.domain.models import Execution, RealizedPnl


class OrderRequest(BaseModel):
    side: OrderSide
    symbol: str = Field(..., min_length=1, max_length=20)
    quantity: int = Field(..., gt=0)
    price: Decimal = Field(..., gt=0, decimal_places=2)
    order_id: str | None = Field(
        None, max_length=60, description="Idempotency key, unique per account"
    )


class SetPriceRequest(BaseModel):
    price: Decimal = Field(..., gt=0, decimal_places=2)


class ExecutionResponse(BaseModel):
    order_id: str
    account_id: str
    side: str
    symbol: str
    quantity: int
    price: Decimal
    amount: Decimal
    realized_pnl: Decimal | None
    executed_at: str

    @classmethod
    def from_execution(cls, e: Execution) -> "ExecutionResponse":
        return cls(
            order_id=e.order_id,
            account_id=e.account_id,
            side=e.side.value,
            symbol=e.symbol,
            quantity=e.quantity,
            price=e.price,
            amount=e.amount,
            realized_pnl=e.realized_pnl,
            executed_at=e.executed_at.isoformat(),
        )


class PositionItem(BaseModel):
    symbol: str
    quantity: int
    avg_cost: Decimal
    ltp: Decimal
    invested: Decimal
    current_value: Decimal
    unrealized_pnl: Decimal
    unrealized_pnl_percent: Decimal
    realized_pnl: Decimal


class RealizedPnlItem(BaseModel):
    id: str
    symbol: str
    order_id: str
    quantity: int
    buy_price: Decimal
    sell_price: Decimal
    pnl: Decimal
    executed_at: str

    @classmethod
    def from_record(cls, r: RealizedPnl) -> "RealizedPnlItem":
        return cls(
            id=r.id,
            symbol=r.symbol,
            order_id=r.order_id,
            quantity=r.quantity,
            buy_price=r.buy_price,
            sell_price=r.sell_price,
            pnl=r.pnl,
            executed_at=r.executed_at.isoformat(),
        )


class PortfolioTotals(BaseModel):
    total_invested: Decimal
    total_current_value: Decimal
    unrealized_pnl: Decimal
    realized_pnl: Decimal
    total_pnl: Decimal
    positions_count: int


class PortfolioSummary(BaseModel):
    account_id: str
    positions: list[PositionItem]
    realized_pnl: list[RealizedPnlItem]
    totals: PortfolioTotals
