"""Domain models for bk_workflow: pure dataclasses.

A WorkflowRequest is a tagged variant: ``kind`` selects which ``details``
schema it carries, and the pair is fixed at submission.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.bk_common.enums import RequestKind, RequestStatus


@dataclass(frozen=True)
class DepositDetails:
    gateway_id: str
    channel: str
    reference: str | None = None        # payer's transfer reference / tx hash


@dataclass(frozen=True)
class WithdrawalDetails:
    method_id: str
    fee: Decimal                        # captured from the method at submission
    payout_account: str | None = None


@dataclass(frozen=True)
class KycDetails:
    full_name: str
    document_name: str
    mime_type: str
    size_bytes: int


RequestDetails = DepositDetails | WithdrawalDetails | KycDetails

DETAILS_BY_KIND: dict[RequestKind, type] = {
    RequestKind.DEPOSIT: DepositDetails,
    RequestKind.WITHDRAWAL: WithdrawalDetails,
    RequestKind.KYC: KycDetails,
}


@dataclass(frozen=True)
class WorkflowRequest:
    id: str
    account_id: str
    kind: RequestKind
    details: RequestDetails
    amount: Decimal | None              # None for KYC
    status: RequestStatus
    created_at: datetime
    decided_at: datetime | None = None
    decided_by: str | None = None
    rejection_reason: str | None = None
    fee_charged: Decimal | None = None

    def __post_init__(self) -> None:
        expected = DETAILS_BY_KIND[self.kind]
        if not isinstance(self.details, expected):
            raise TypeError(
                f"{self.kind.value} request needs {expected.__name__}, "
                f"got {type(self.details).__name__}"
            )

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING


@dataclass
class PaymentGateway:
    id: str
    name: str
    address: str                        # e.g. TRC20 wallet address shown to payer
    min_deposit: Decimal
    confirmation_time: str = ""
    instructions: str = ""
    is_active: bool = True


@dataclass
class WithdrawalMethod:
    id: str
    name: str
    method_type: str                    # "bank", "upi", "crypto", ...
    min_amount: Decimal
    fee: Decimal
    processing_time: str = ""
    is_active: bool = True
