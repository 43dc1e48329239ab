"""WorkflowService: deposit, withdrawal and KYC requests.

Boundary validation (gateway/method availability, minimums, fee) happens
here; the ledger effects of each transition live in the DecisionPolicy
table of ``domain.state_machine``.
"""

import logging
from dataclasses import replace
from decimal import Decimal

from src.bk_common.datetime_utils import utc_now
from src.bk_common.enums import NotificationCategory, RequestKind, RequestStatus
from src.bk_common.errors import InvalidAmountError, MethodUnavailableError
from src.bk_common.id_generator import generate_id
from src.bk_common.money import money_to_display, require_positive, to_money
from src.bk_ledger.domain.records import RecordCodec
from src.bk_ledger.domain.store import LedgerStore
from src.bk_notify.domain.emitter import NotificationEmitter
from src.bk_workflow.application.schemas import (
    GatewayRequest,
    GatewayResponse,
    RequestResponse,
    WithdrawalMethodRequest,
    WithdrawalMethodResponse,
)
from src.bk_workflow.domain.models import (
    DepositDetails,
    KycDetails,
    PaymentGateway,
    WithdrawalDetails,
    WithdrawalMethod,
    WorkflowRequest,
)
from src.bk_workflow.domain.repository import PaymentConfigRepositoryProtocol
from src.bk_workflow.domain.state_machine import WorkflowEngine

logger = logging.getLogger(__name__)

_ID_PREFIX = {
    RequestKind.DEPOSIT: "DEP",
    RequestKind.WITHDRAWAL: "WDR",
    RequestKind.KYC: "KYC",
}

GATEWAY_RECORDS = RecordCodec("payment_gateway", PaymentGateway, key=lambda g: g.id)
METHOD_RECORDS = RecordCodec("withdrawal_method", WithdrawalMethod, key=lambda m: m.id)


class WorkflowService:
    def __init__(
        self,
        store: LedgerStore,
        engine: WorkflowEngine,
        config: PaymentConfigRepositoryProtocol,
        emitter: NotificationEmitter,
    ) -> None:
        self._store = store
        self._engine = engine
        self._config = config
        self._emitter = emitter

    async def restore(self) -> None:
        for record in await self._store.load_records(GATEWAY_RECORDS.record_type):
            self._config.save_gateway(GATEWAY_RECORDS.decode(record))
        for record in await self._store.load_records(METHOD_RECORDS.record_type):
            self._config.save_method(METHOD_RECORDS.decode(record))
        pending = await self._engine.restore()
        logger.info("Workflow restored: %d pending request(s)", pending)

    # ------------------------------------------------------------------
    # User submissions
    # ------------------------------------------------------------------

    async def submit_deposit(
        self,
        account_id: str,
        amount: Decimal,
        gateway_id: str,
        reference: str | None = None,
    ) -> RequestResponse:
        gateway = self._config.get_gateway(gateway_id)
        if gateway is None or not gateway.is_active:
            raise MethodUnavailableError(gateway_id)
        amount = require_positive(amount)
        if amount < gateway.min_deposit:
            raise InvalidAmountError(
                f"minimum deposit via {gateway.name} is {gateway.min_deposit}"
            )
        request = self._new_request(
            account_id,
            RequestKind.DEPOSIT,
            DepositDetails(gateway_id=gateway.id, channel=gateway.name, reference=reference),
            amount,
        )
        await self._engine.submit(request)
        await self._emitter.emit_admin(
            NotificationCategory.WALLET_UPDATES,
            "New deposit request",
            f"{account_id} requested a deposit of {money_to_display(amount)} via {gateway.name}",
        )
        return RequestResponse.from_request(request)

    async def submit_withdrawal(
        self,
        account_id: str,
        amount: Decimal,
        method_id: str,
        payout_account: str | None = None,
    ) -> RequestResponse:
        method = self._config.get_method(method_id)
        if method is None or not method.is_active:
            raise MethodUnavailableError(method_id)
        amount = require_positive(amount)
        if amount < method.min_amount:
            raise InvalidAmountError(f"minimum withdrawal via {method.name} is {method.min_amount}")
        if amount <= method.fee:
            raise InvalidAmountError(f"amount {amount} does not cover the fee {method.fee}")
        request = self._new_request(
            account_id,
            RequestKind.WITHDRAWAL,
            WithdrawalDetails(method_id=method.id, fee=method.fee, payout_account=payout_account),
            amount,
        )
        await self._engine.submit(request)
        await self._emitter.emit_admin(
            NotificationCategory.WALLET_UPDATES,
            "New withdrawal request",
            f"{account_id} requested a withdrawal of {money_to_display(amount)} via {method.name}",
        )
        return RequestResponse.from_request(request)

    async def submit_kyc(
        self,
        account_id: str,
        full_name: str,
        document_name: str,
        mime_type: str,
        size_bytes: int,
    ) -> RequestResponse:
        request = self._new_request(
            account_id,
            RequestKind.KYC,
            KycDetails(
                full_name=full_name,
                document_name=document_name,
                mime_type=mime_type,
                size_bytes=size_bytes,
            ),
            None,
        )
        await self._engine.submit(request)
        await self._emitter.emit_admin(
            NotificationCategory.APPROVALS,
            "New KYC submission",
            f"{full_name} ({account_id}) submitted {document_name}",
        )
        return RequestResponse.from_request(request)

    # ------------------------------------------------------------------
    # Admin decisions
    # ------------------------------------------------------------------

    async def approve(
        self, kind: RequestKind, request_id: str, decided_by: str | None = None
    ) -> RequestResponse:
        decided = await self._engine.decide(
            request_id, approve=True, decided_by=decided_by, expected_kind=kind
        )
        await self._notify_decision(decided)
        return RequestResponse.from_request(decided)

    async def reject(
        self,
        kind: RequestKind,
        request_id: str,
        reason: str | None = None,
        decided_by: str | None = None,
    ) -> RequestResponse:
        decided = await self._engine.decide(
            request_id,
            approve=False,
            reason=reason,
            decided_by=decided_by,
            expected_kind=kind,
        )
        await self._notify_decision(decided)
        return RequestResponse.from_request(decided)

    def get_request(self, request_id: str) -> RequestResponse:
        return RequestResponse.from_request(self._engine.get(request_id))

    def list_pending(self, kind: RequestKind) -> list[RequestResponse]:
        return [
            RequestResponse.from_request(r)
            for r in self._engine.repo.list_requests(kind=kind, status=RequestStatus.PENDING)
        ]

    def list_for_account(
        self, account_id: str, kind: RequestKind | None = None
    ) -> list[RequestResponse]:
        return [
            RequestResponse.from_request(r)
            for r in self._engine.repo.list_requests(kind=kind, account_id=account_id)
        ]

    # ------------------------------------------------------------------
    # Payment configuration (admin)
    # ------------------------------------------------------------------

    async def add_gateway(self, body: GatewayRequest) -> GatewayResponse:
        gateway = PaymentGateway(
            id=generate_id("GW"),
            name=body.name,
            address=body.address,
            min_deposit=to_money(body.min_deposit),
            confirmation_time=body.confirmation_time,
            instructions=body.instructions,
        )
        await self._save_gateway(gateway)
        logger.info("Payment gateway added: %s (%s)", gateway.id, gateway.name)
        return GatewayResponse.from_gateway(gateway)

    async def update_gateway(self, gateway_id: str, body: GatewayRequest) -> GatewayResponse:
        gateway = self._config.get_gateway(gateway_id)
        if gateway is None:
            raise MethodUnavailableError(gateway_id)
        gateway = replace(
            gateway,
            name=body.name,
            address=body.address,
            min_deposit=to_money(body.min_deposit),
            confirmation_time=body.confirmation_time,
            instructions=body.instructions,
        )
        await self._save_gateway(gateway)
        return GatewayResponse.from_gateway(gateway)

    async def set_gateway_active(self, gateway_id: str, is_active: bool) -> GatewayResponse:
        gateway = self._config.get_gateway(gateway_id)
        if gateway is None:
            raise MethodUnavailableError(gateway_id)
        gateway = replace(gateway, is_active=is_active)
        await self._save_gateway(gateway)
        logger.info("Payment gateway %s active=%s", gateway_id, is_active)
        return GatewayResponse.from_gateway(gateway)

    def list_gateways(self, active_only: bool = False) -> list[GatewayResponse]:
        return [GatewayResponse.from_gateway(g) for g in self._config.list_gateways(active_only)]

    async def add_method(self, body: WithdrawalMethodRequest) -> WithdrawalMethodResponse:
        method = WithdrawalMethod(
            id=generate_id("WM"),
            name=body.name,
            method_type=body.method_type,
            min_amount=to_money(body.min_amount),
            fee=to_money(body.fee),
            processing_time=body.processing_time,
        )
        await self._save_method(method)
        logger.info("Withdrawal method added: %s (%s, fee=%s)", method.id, method.name, method.fee)
        return WithdrawalMethodResponse.from_method(method)

    async def update_method(
        self, method_id: str, body: WithdrawalMethodRequest
    ) -> WithdrawalMethodResponse:
        method = self._config.get_method(method_id)
        if method is None:
            raise MethodUnavailableError(method_id)
        method = replace(
            method,
            name=body.name,
            method_type=body.method_type,
            min_amount=to_money(body.min_amount),
            fee=to_money(body.fee),
            processing_time=body.processing_time,
        )
        await self._save_method(method)
        return WithdrawalMethodResponse.from_method(method)

    async def set_method_active(self, method_id: str, is_active: bool) -> WithdrawalMethodResponse:
        method = self._config.get_method(method_id)
        if method is None:
            raise MethodUnavailableError(method_id)
        method = replace(method, is_active=is_active)
        await self._save_method(method)
        logger.info("Withdrawal method %s active=%s", method_id, is_active)
        return WithdrawalMethodResponse.from_method(method)

    def list_methods(self, active_only: bool = False) -> list[WithdrawalMethodResponse]:
        return [
            WithdrawalMethodResponse.from_method(m)
            for m in self._config.list_methods(active_only)
        ]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _save_gateway(self, gateway: PaymentGateway) -> None:
        await self._store.save_record(GATEWAY_RECORDS.encode(gateway))
        self._config.save_gateway(gateway)

    async def _save_method(self, method: WithdrawalMethod) -> None:
        await self._store.save_record(METHOD_RECORDS.encode(method))
        self._config.save_method(method)

    @staticmethod
    def _new_request(
        account_id: str,
        kind: RequestKind,
        details: DepositDetails | WithdrawalDetails | KycDetails,
        amount: Decimal | None,
    ) -> WorkflowRequest:
        return WorkflowRequest(
            id=generate_id(_ID_PREFIX[kind]),
            account_id=account_id,
            kind=kind,
            details=details,
            amount=amount,
            status=RequestStatus.PENDING,
            created_at=utc_now(),
        )

    async def _notify_decision(self, r: WorkflowRequest) -> None:
        approved = r.status == RequestStatus.APPROVED
        if r.kind == RequestKind.KYC:
            title = "KYC approved" if approved else "KYC rejected"
            message = (
                "Your KYC verification is complete."
                if approved
                else f"Your KYC submission was rejected. {r.rejection_reason or ''}".strip()
            )
            category = NotificationCategory.APPROVALS
        else:
            noun = "Deposit" if r.kind == RequestKind.DEPOSIT else "Withdrawal"
            amount = money_to_display(r.amount)
            if approved and r.fee_charged:
                message = (
                    f"Your withdrawal of {amount} has been processed. "
                    f"Net payout {money_to_display(r.amount - r.fee_charged)} "
                    f"after a {money_to_display(r.fee_charged)} fee."
                )
            elif approved:
                message = f"Your {noun.lower()} of {amount} has been approved."
            else:
                reason = r.rejection_reason or ""
                message = f"Your {noun.lower()} of {amount} was rejected. {reason}".strip()
            title = f"{noun} {'approved' if approved else 'rejected'}"
            category = NotificationCategory.WALLET_UPDATES
        await self._emitter.emit(r.account_id, category, title, message)
