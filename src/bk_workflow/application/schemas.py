"""Pydantic schemas for deposit / withdrawal / KYC requests and payment config."""

from decimal import Decimal

from pydantic import BaseModel, Field

from src.bk_common.money import money_to_display
from src.bk_workflow.domain.models import (
    DepositDetails,
    KycDetails,
    PaymentGateway,
    WithdrawalDetails,
    WithdrawalMethod,
    WorkflowRequest,
)

MAX_KYC_DOCUMENT_BYTES = 10 * 1024 * 1024

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class SubmitDepositRequest(BaseModel):
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    gateway_id: str = Field(..., min_length=1)
    reference: str | None = Field(None, max_length=200)


class SubmitWithdrawalRequest(BaseModel):
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    method_id: str = Field(..., min_length=1)
    payout_account: str | None = Field(None, max_length=200)


class SubmitKycRequest(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=200)
    document_name: str = Field(..., min_length=1, max_length=255)
    mime_type: str = Field(..., pattern=r"^(image/(png|jpeg)|application/pdf)$")
    size_bytes: int = Field(..., gt=0, le=MAX_KYC_DOCUMENT_BYTES)


class RejectRequest(BaseModel):
    reason: str | None = Field(None, max_length=500)


class GatewayRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    address: str = Field(..., min_length=1, max_length=200)
    min_deposit: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    confirmation_time: str = ""
    instructions: str = ""


class WithdrawalMethodRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    method_type: str = Field(..., min_length=1, max_length=30)
    min_amount: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    fee: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    processing_time: str = ""


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class RequestResponse(BaseModel):
    id: str
    account_id: str
    kind: str
    status: str
    amount: Decimal | None
    amount_display: str | None
    fee: Decimal | None
    net_amount: Decimal | None
    details: dict[str, object]
    created_at: str
    decided_at: str | None
    decided_by: str | None
    rejection_reason: str | None
    fee_charged: Decimal | None

    @classmethod
    def from_request(cls, r: WorkflowRequest) -> "RequestResponse":
        fee = r.details.fee if isinstance(r.details, WithdrawalDetails) else None
        net = r.amount - fee if r.amount is not None and fee is not None else r.amount
        return cls(
            id=r.id,
            account_id=r.account_id,
            kind=r.kind.value,
            status=r.status.value,
            amount=r.amount,
            amount_display=money_to_display(r.amount) if r.amount is not None else None,
            fee=fee,
            net_amount=net,
            details=_details_dict(r.details),
            created_at=r.created_at.isoformat(),
            decided_at=r.decided_at.isoformat() if r.decided_at else None,
            decided_by=r.decided_by,
            rejection_reason=r.rejection_reason,
            fee_charged=r.fee_charged,
        )


def _details_dict(details: DepositDetails | WithdrawalDetails | KycDetails) -> dict[str, object]:
    if isinstance(details, DepositDetails):
        return {
            "gateway_id": details.gateway_id,
            "channel": details.channel,
            "reference": details.reference,
        }
    if isinstance(details, WithdrawalDetails):
        return {"method_id": details.method_id, "payout_account": details.payout_account}
    return {
        "full_name": details.full_name,
        "document_name": details.document_name,
        "mime_type": details.mime_type,
        "size_bytes": details.size_bytes,
    }


class GatewayResponse(BaseModel):
    id: str
    name: str
    address: str
    min_deposit: Decimal
    confirmation_time: str
    instructions: str
    is_active: bool

    @classmethod
    def from_gateway(cls, g: PaymentGateway) -> "GatewayResponse":
        return cls(
            id=g.id,
            name=g.name,
            address=g.address,
            min_deposit=g.min_deposit,
            confirmation_time=g.confirmation_time,
            instructions=g.instructions,
            is_active=g.is_active,
        )


class WithdrawalMethodResponse(BaseModel):
    id: str
    name: str
    method_type: str
    min_amount: Decimal
    fee: Decimal
    processing_time: str
    is_active: bool

    @classmethod
    def from_method(cls, m: WithdrawalMethod) -> "WithdrawalMethodResponse":
        return cls(
            id=m.id,
            name=m.name,
            method_type=m.method_type,
            min_amount=m.min_amount,
            fee=m.fee,
            processing_time=m.processing_time,
            is_active=m.is_active,
        )
