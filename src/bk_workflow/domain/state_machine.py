"""Pending -> Approved | Rejected state machine shared by every request kind.

Each kind plugs in a DecisionPolicy: what to stage on the ledger when the
request is submitted, approved or rejected. The engine owns the rest:
locking, the terminal-state guard, and making the status change visible
only after the ledger commit.

    PENDING --approve--> APPROVED   (terminal)
       |
       +-----reject----> REJECTED   (terminal)
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from decimal import Decimal

from src.bk_common.datetime_utils import utc_now
from src.bk_common.enums import KycStatus, LedgerEntryKind, RequestKind, RequestStatus
from src.bk_common.errors import (
    AlreadyDecidedError,
    KycAlreadySubmittedError,
    ReasonRequiredError,
    RequestNotFoundError,
)
from src.bk_ledger.domain.records import RecordCodec
from src.bk_ledger.domain.store import LedgerStore, LedgerTransaction
from src.bk_workflow.domain.models import WithdrawalDetails, WorkflowRequest
from src.bk_workflow.domain.repository import RequestRepositoryProtocol

logger = logging.getLogger(__name__)

REQUEST_RECORDS = RecordCodec(
    "workflow_request", WorkflowRequest, key=lambda r: r.id, owner=lambda r: r.account_id
)

# Stages ledger work for a request and returns the fee charged, if any.
Effect = Callable[[LedgerTransaction, WorkflowRequest], Awaitable[Decimal | None]]


async def no_effect(txn: LedgerTransaction, request: WorkflowRequest) -> Decimal | None:
    return None


@dataclass(frozen=True)
class DecisionPolicy:
    on_submit: Effect
    on_approve: Effect
    on_reject: Effect
    reason_required: bool = False


class WorkflowEngine:
    def __init__(
        self,
        store: LedgerStore,
        repo: RequestRepositoryProtocol,
        policies: dict[RequestKind, DecisionPolicy],
    ) -> None:
        self._store = store
        self._repo = repo
        self._policies = policies

    @property
    def repo(self) -> RequestRepositoryProtocol:
        return self._repo

    def get(self, request_id: str) -> WorkflowRequest:
        request = self._repo.get(request_id)
        if request is None:
            raise RequestNotFoundError(request_id)
        return request

    async def restore(self) -> int:
        """Reload every stored request; returns how many are still pending."""
        pending = 0
        for record in await self._store.load_records(REQUEST_RECORDS.record_type):
            request = REQUEST_RECORDS.decode(record)
            self._repo.save(request)
            pending += request.is_pending
        return pending

    async def submit(self, request: WorkflowRequest) -> WorkflowRequest:
        policy = self._policies[request.kind]
        async with self._store.transaction(request.account_id) as txn:
            txn.require_enabled()
            await policy.on_submit(txn, request)
            txn.persist(REQUEST_RECORDS.encode(request), lambda: self._repo.save(request))
        logger.info(
            "%s submitted: %s account=%s amount=%s",
            request.kind.value, request.id, request.account_id, request.amount,
        )
        return request

    async def decide(
        self,
        request_id: str,
        approve: bool,
        reason: str | None = None,
        decided_by: str | None = None,
        expected_kind: RequestKind | None = None,
    ) -> WorkflowRequest:
        """Apply the approve or reject effect exactly once, then go terminal."""
        request = self.get(request_id)
        if expected_kind is not None and request.kind != expected_kind:
            raise RequestNotFoundError(request_id)
        policy = self._policies[request.kind]
        if not approve and policy.reason_required and not (reason and reason.strip()):
            raise ReasonRequiredError()

        async with self._store.transaction(request.account_id) as txn:
            # Re-read under the account lock: a concurrent decision may have won.
            current = self.get(request_id)
            if not current.is_pending:
                logger.debug("%s already %s, decision ignored", request_id, current.status.value)
                raise AlreadyDecidedError(request_id, current.status.value)
            effect = policy.on_approve if approve else policy.on_reject
            fee = await effect(txn, current)
            decided = replace(
                current,
                status=RequestStatus.APPROVED if approve else RequestStatus.REJECTED,
                decided_at=utc_now(),
                decided_by=decided_by,
                rejection_reason=None if approve else reason,
                fee_charged=fee,
            )
            txn.persist(REQUEST_RECORDS.encode(decided), lambda: self._repo.save(decided))

        logger.info(
            "%s %s: %s account=%s",
            decided.kind.value, decided.status.value, decided.id, decided.account_id,
        )
        return decided


# ---------------------------------------------------------------------------
# Per-kind effects
# ---------------------------------------------------------------------------


async def _credit_deposit(txn: LedgerTransaction, req: WorkflowRequest) -> Decimal | None:
    await txn.credit(req.amount, LedgerEntryKind.DEPOSIT, req.id, "Deposit approved")
    return None


async def _block_withdrawal(txn: LedgerTransaction, req: WorkflowRequest) -> Decimal | None:
    await txn.block(req.amount, LedgerEntryKind.WITHDRAWAL_BLOCK, req.id, "Withdrawal requested")
    return None


async def _pay_out_withdrawal(txn: LedgerTransaction, req: WorkflowRequest) -> Decimal | None:
    assert isinstance(req.details, WithdrawalDetails)
    fee = req.details.fee
    await txn.release(req.amount, LedgerEntryKind.WITHDRAWAL_RELEASE, req.id, "Withdrawal approved")
    await txn.debit(req.amount - fee, LedgerEntryKind.WITHDRAWAL, req.id, "Withdrawal paid out")
    if fee > 0:
        await txn.debit(fee, LedgerEntryKind.FEE, req.id, "Withdrawal fee")
    return fee


async def _refund_withdrawal(txn: LedgerTransaction, req: WorkflowRequest) -> Decimal | None:
    await txn.release(req.amount, LedgerEntryKind.WITHDRAWAL_RELEASE, req.id, "Withdrawal rejected")
    return None


async def _submit_kyc(txn: LedgerTransaction, req: WorkflowRequest) -> Decimal | None:
    current = txn.account.kyc_status
    if current in (KycStatus.PENDING, KycStatus.APPROVED):
        raise KycAlreadySubmittedError(txn.account.id, current.value)
    txn.set_kyc_status(KycStatus.PENDING)
    return None


def _set_kyc(status: KycStatus) -> Effect:
    async def effect(txn: LedgerTransaction, req: WorkflowRequest) -> Decimal | None:
        txn.set_kyc_status(status)
        return None

    return effect


DEFAULT_POLICIES: dict[RequestKind, DecisionPolicy] = {
    RequestKind.DEPOSIT: DecisionPolicy(
        on_submit=no_effect,
        on_approve=_credit_deposit,
        on_reject=no_effect,
    ),
    RequestKind.WITHDRAWAL: DecisionPolicy(
        on_submit=_block_withdrawal,
        on_approve=_pay_out_withdrawal,
        on_reject=_refund_withdrawal,
        reason_required=True,
    ),
    RequestKind.KYC: DecisionPolicy(
        on_submit=_submit_kyc,
        on_approve=_set_kyc(KycStatus.APPROVED),
        on_reject=_set_kyc(KycStatus.REJECTED),
    ),
}
