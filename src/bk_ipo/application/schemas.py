"""Pydantic schemas for the IPO book and applications."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from src.bk_common.enums import DiscountType, IpoStatus
from src.bk_common.money import money_to_display
from src.bk_ipo.domain.models import Ipo, IpoApplication
from src.bk_ipo.domain.pricing import effective_price


class IpoRequest(BaseModel):
    company_name: str = Field(..., min_length=1, max_length=200)
    symbol: str = Field(..., min_length=1, max_length=20)
    ipo_type: str = Field("Mainline", pattern=r"^(Mainline|SME)$")
    price_min: Decimal = Field(..., gt=0, decimal_places=2)
    price_max: Decimal = Field(..., gt=0, decimal_places=2)
    final_price: Decimal | None = Field(None, gt=0, decimal_places=2)
    lot_size: int = Field(..., gt=0)
    min_investment: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    status: IpoStatus = IpoStatus.UPCOMING
    discount_type: DiscountType | None = None
    discount_value: Decimal | None = Field(None, ge=0, decimal_places=2)
    open_date: date | None = None
    close_date: date | None = None
    description: str = ""

    @model_validator(mode="after")
    def _check_band(self) -> "IpoRequest":
        if self.price_max < self.price_min:
            raise ValueError("price_max must be >= price_min")
        if self.discount_type == DiscountType.PERCENTAGE and (self.discount_value or 0) > 100:
            raise ValueError("percentage discount must be <= 100")
        return self


class IpoStatusRequest(BaseModel):
    status: IpoStatus


class ApplyIpoRequest(BaseModel):
    lots: int = Field(..., gt=0, le=1000)


class IpoResponse(BaseModel):
    id: str
    company_name: str
    symbol: str
    ipo_type: str
    price_min: Decimal
    price_max: Decimal
    final_price: Decimal | None
    effective_price: Decimal
    lot_size: int
    min_investment: Decimal
    status: str
    discount_type: str | None
    discount_value: Decimal | None
    open_date: date | None
    close_date: date | None
    description: str

    @classmethod
    def from_ipo(cls, ipo: Ipo) -> "IpoResponse":
        return cls(
            id=ipo.id,
            company_name=ipo.company_name,
            symbol=ipo.symbol,
            ipo_type=ipo.ipo_type,
            price_min=ipo.price_min,
            price_max=ipo.price_max,
            final_price=ipo.final_price,
            effective_price=effective_price(ipo),
            lot_size=ipo.lot_size,
            min_investment=ipo.min_investment,
            status=ipo.status.value,
            discount_type=ipo.discount_type.value if ipo.discount_type else None,
            discount_value=ipo.discount_value,
            open_date=ipo.open_date,
            close_date=ipo.close_date,
            description=ipo.description,
        )


class IpoApplicationResponse(BaseModel):
    id: str
    account_id: str
    ipo_id: str
    lots: int
    shares: int
    price_per_share: Decimal
    amount: Decimal
    amount_display: str
    status: str
    applied_at: str
    decided_at: str | None
    decided_by: str | None

    @classmethod
    def from_application(cls, a: IpoApplication) -> "IpoApplicationResponse":
        return cls(
            id=a.id,
            account_id=a.account_id,
            ipo_id=a.ipo_id,
            lots=a.lots,
            shares=a.shares,
            price_per_share=a.price_per_share,
            amount=a.amount,
            amount_display=money_to_display(a.amount),
            status=a.status.value,
            applied_at=a.applied_at.isoformat(),
            decided_at=a.decided_at.isoformat() if a.decided_at else None,
            decided_by=a.decided_by,
        )
