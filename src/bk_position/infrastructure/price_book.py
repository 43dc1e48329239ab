"""Static last-traded-price book.

Stands in for the external market-price collaborator: the portfolio view
only ever calls ``get``. Admins may pin prices for display.
"""

from decimal import Decimal

from src.bk_common.money import require_positive


class StaticPriceBook:
    def __init__(self, prices: dict[str, Decimal] | None = None) -> None:
        self._prices: dict[str, Decimal] = {}
        for symbol, price in (prices or {}).items():
            self.set_price(symbol, price)

    def get(self, symbol: str) -> Decimal | None:
        return self._prices.get(symbol.upper())

    def set_price(self, symbol: str, price: Decimal) -> Decimal:
        self._prices[symbol.upper()] = require_positive(price, "price")
        return self._prices[symbol.upper()]

    def all(self) -> dict[str, Decimal]:
        return dict(self._prices)
