"""IPO price resolution.

The base price is the final (cut-off) price once fixed, otherwise the low
end of the band. A configured discount is then applied and the result is
quantized and floored at zero.
"""

from decimal import Decimal

from src.bk_common.enums import DiscountType
from src.bk_common.money import ZERO, quantize
from src.bk_ipo.domain.models import Ipo


def base_price(ipo: Ipo) -> Decimal:
    return ipo.final_price if ipo.final_price else ipo.price_min


def effective_price(ipo: Ipo) -> Decimal:
    price = base_price(ipo)
    if ipo.discount_type is not None and ipo.discount_value:
        if ipo.discount_type == DiscountType.PERCENTAGE:
            price = price * (Decimal(100) - ipo.discount_value) / Decimal(100)
        else:
            price = price - ipo.discount_value
    return max(quantize(price), ZERO)


def application_amount(ipo: Ipo, lots: int) -> Decimal:
    return quantize(effective_price(ipo) * ipo.lot_size * lots)
