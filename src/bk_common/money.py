"""Fixed-point decimal utilities for balances, prices and P&L.

All money and price values are Decimal quantized to two places. No float.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from src.bk_common.errors import InvalidAmountError

MONEY_QUANTUM = Decimal("0.01")
ZERO = Decimal("0.00")


def quantize(value: Decimal) -> Decimal:
    """Round half-up to the money quantum (also used for prices and average cost)."""
    return value.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def to_money(value: Decimal | int | str | float) -> Decimal:
    """Coerce an inbound value to a quantized Decimal.

    Floats go through str() so 0.1 becomes Decimal('0.10'), not its binary expansion.
    """
    if isinstance(value, bool):
        raise InvalidAmountError(f"not a number: {value!r}")
    try:
        dec = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise InvalidAmountError(f"not a number: {value!r}") from e
    if not dec.is_finite():
        raise InvalidAmountError(f"not finite: {value!r}")
    return quantize(dec)


def require_positive(value: Decimal | int | str | float, what: str = "amount") -> Decimal:
    amount = to_money(value)
    if amount <= ZERO:
        raise InvalidAmountError(f"{what} must be positive, got {amount}")
    return amount


def require_quantity(quantity: int) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InvalidAmountError(f"quantity must be a positive integer, got {quantity!r}")
    return quantity


def money_to_display(amount: Decimal, symbol: str = "₹") -> str:
    """Display string: Decimal('1500') -> '₹1,500.00', Decimal('-12') -> '-₹12.00'."""
    amount = quantize(amount)
    if amount < 0:
        return f"-{symbol}{-amount:,.2f}"
    return f"{symbol}{amount:,.2f}"
