"""Domain models for bk_ipo: pure dataclasses."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from src.bk_common.enums import DiscountType, IpoApplicationStatus, IpoStatus


@dataclass
class Ipo:
    id: str
    company_name: str
    symbol: str                      # listing symbol allotted shares are booked under
    ipo_type: str                    # "Mainline" | "SME"
    price_min: Decimal
    price_max: Decimal
    lot_size: int
    min_investment: Decimal
    status: IpoStatus
    final_price: Decimal | None = None
    discount_type: DiscountType | None = None
    discount_value: Decimal | None = None
    open_date: date | None = None
    close_date: date | None = None
    description: str = ""


@dataclass(frozen=True)
class IpoApplication:
    id: str
    account_id: str
    ipo_id: str
    lots: int
    shares: int
    price_per_share: Decimal         # effective price at application time
    amount: Decimal                  # blocked at submission
    status: IpoApplicationStatus
    applied_at: datetime
    decided_at: datetime | None = None
    decided_by: str | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == IpoApplicationStatus.PENDING_ALLOTMENT
