"""Weighted-average cost accounting. Pure functions, no I/O.

Buy:   new_avg = (old_qty * old_avg + qty * price) / (old_qty + qty)
       rounded to the price quantum after every buy
Sell:  realized = qty * (price - old_avg); avg_cost unchanged
"""

from dataclasses import replace
from decimal import Decimal

from src.bk_common.datetime_utils import utc_now
from src.bk_common.errors import InsufficientPositionError
from src.bk_common.money import quantize
from src.bk_position.domain.models import Position


def apply_buy(position: Position, quantity: int, price: Decimal) -> Position:
    new_qty = position.quantity + quantity
    total_cost = position.quantity * position.avg_cost + quantity * price
    return replace(
        position,
        quantity=new_qty,
        avg_cost=quantize(total_cost / new_qty),
        updated_at=utc_now(),
    )


def apply_sell(position: Position, quantity: int, price: Decimal) -> tuple[Position, Decimal]:
    """Returns (reduced position, realized P&L). Raises if quantity exceeds holdings."""
    if quantity > position.quantity:
        raise InsufficientPositionError(position.symbol, quantity, position.quantity)
    realized = quantize(quantity * (price - position.avg_cost))
    remaining = position.quantity - quantity
    return (
        replace(
            position,
            quantity=remaining,
            realized_pnl=position.realized_pnl + realized,
            updated_at=utc_now(),
        ),
        realized,
    )
