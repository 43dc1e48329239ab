"""Unit tests for the deposit / withdrawal / KYC workflows."""

import asyncio
from decimal import Decimal

import pytest

from src.bk_common.enums import KycStatus, LedgerEntryKind, RequestKind
from src.bk_common.errors import (
    AccountDisabledError,
    AlreadyDecidedError,
    InsufficientFundsError,
    InvalidAmountError,
    KycAlreadySubmittedError,
    MethodUnavailableError,
    ReasonRequiredError,
    RequestNotFoundError,
)
from src.bk_ledger.domain.invariants import verify_conservation
from src.bk_workflow.application.schemas import GatewayRequest, WithdrawalMethodRequest
from src.container import BrokerageCore

D = Decimal


async def _gateway(core: BrokerageCore, min_deposit: str = "100") -> str:
    gw = await core.workflow.add_gateway(
        GatewayRequest(name="UPI", address="pay@bank", min_deposit=D(min_deposit))
    )
    return gw.id


async def _method(core: BrokerageCore, fee: str = "20", min_amount: str = "100") -> str:
    wm = await core.workflow.add_method(
        WithdrawalMethodRequest(
            name="Bank transfer", method_type="BANK", min_amount=D(min_amount), fee=D(fee)
        )
    )
    return wm.id


class TestDeposit:
    async def test_approve_credits_balance(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "0")
        gw = await _gateway(core)
        req = await core.workflow.submit_deposit("A1", D("500"), gw, "UTR123")
        assert req.status == "PENDING"
        assert (await core.store.get_account("A1")).balance == D("0.00")

        decided = await core.workflow.approve(RequestKind.DEPOSIT, req.id, "admin-1")

        assert decided.status == "APPROVED"
        assert decided.decided_by == "admin-1"
        account = await core.store.get_account("A1")
        assert account.balance == D("500.00")
        assert account.blocked == D("0.00")

    async def test_reject_has_no_ledger_effect(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "0")
        gw = await _gateway(core)
        req = await core.workflow.submit_deposit("A1", D("500"), gw)
        decided = await core.workflow.reject(RequestKind.DEPOSIT, req.id, "no proof")
        assert decided.rejection_reason == "no proof"
        account = await core.store.get_account("A1")
        assert account.balance == D("0.00")
        assert account.entry_seq == 0

    async def test_below_gateway_minimum(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "0")
        gw = await _gateway(core, min_deposit="100")
        with pytest.raises(InvalidAmountError):
            await core.workflow.submit_deposit("A1", D("99.99"), gw)

    async def test_inactive_gateway(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "0")
        gw = await _gateway(core)
        await core.workflow.set_gateway_active(gw, False)
        with pytest.raises(MethodUnavailableError):
            await core.workflow.submit_deposit("A1", D("500"), gw)

    async def test_double_approve_credits_once(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "0")
        gw = await _gateway(core)
        req = await core.workflow.submit_deposit("A1", D("500"), gw)
        await core.workflow.approve(RequestKind.DEPOSIT, req.id)
        with pytest.raises(AlreadyDecidedError):
            await core.workflow.approve(RequestKind.DEPOSIT, req.id)
        assert (await core.store.get_account("A1")).balance == D("500.00")

    async def test_concurrent_approvals_apply_once(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "0")
        gw = await _gateway(core)
        req = await core.workflow.submit_deposit("A1", D("500"), gw)

        results = await asyncio.gather(
            *(core.workflow.approve(RequestKind.DEPOSIT, req.id) for _ in range(5)),
            return_exceptions=True,
        )

        assert sum(1 for r in results if not isinstance(r, Exception)) == 1
        assert all(isinstance(r, AlreadyDecidedError) for r in results if isinstance(r, Exception))
        assert (await core.store.get_account("A1")).balance == D("500.00")

    async def test_wrong_kind_is_not_found(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "0")
        gw = await _gateway(core)
        req = await core.workflow.submit_deposit("A1", D("500"), gw)
        with pytest.raises(RequestNotFoundError):
            await core.workflow.approve(RequestKind.WITHDRAWAL, req.id)

    async def test_disabled_account_cannot_submit(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "0")
        await core.admin.disable_account("A1")
        gw = await _gateway(core)
        with pytest.raises(AccountDisabledError):
            await core.workflow.submit_deposit("A1", D("500"), gw)
        assert core.workflow.list_pending(RequestKind.DEPOSIT) == []


class TestWithdrawal:
    async def test_submit_blocks_amount(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "1000")
        wm = await _method(core)
        req = await core.workflow.submit_withdrawal("A1", D("1000"), wm, "XX-1234")
        assert req.fee == D("20.00")
        assert req.net_amount == D("980.00")
        account = await core.store.get_account("A1")
        assert account.balance == D("1000.00")
        assert account.blocked == D("1000.00")
        assert account.spendable == D("0.00")

    async def test_approve_pays_out_net_and_charges_fee(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "1000")
        wm = await _method(core, fee="20")
        req = await core.workflow.submit_withdrawal("A1", D("1000"), wm)

        decided = await core.workflow.approve(RequestKind.WITHDRAWAL, req.id)

        assert decided.fee_charged == D("20.00")
        account = await core.store.get_account("A1")
        assert account.balance == D("0.00")
        assert account.blocked == D("0.00")
        payout = await core.store.repo.find_entry("A1", req.id, LedgerEntryKind.WITHDRAWAL.value)
        fee = await core.store.repo.find_entry("A1", req.id, LedgerEntryKind.FEE.value)
        assert payout is not None and payout.amount == D("-980.00")
        assert fee is not None and fee.amount == D("-20.00")
        assert await verify_conservation(core.store.repo) == []

    async def test_reject_restores_spendable(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "1000")
        wm = await _method(core)
        req = await core.workflow.submit_withdrawal("A1", D("600"), wm)
        await core.workflow.reject(RequestKind.WITHDRAWAL, req.id, "details mismatch")
        account = await core.store.get_account("A1")
        assert account.balance == D("1000.00")
        assert account.spendable == D("1000.00")

    @pytest.mark.parametrize("reason", [None, "", "   "])
    async def test_reject_requires_reason(
        self, core: BrokerageCore, fund, reason: str | None
    ) -> None:
        await fund(core.store, "A1", "1000")
        wm = await _method(core)
        req = await core.workflow.submit_withdrawal("A1", D("600"), wm)
        with pytest.raises(ReasonRequiredError):
            await core.workflow.reject(RequestKind.WITHDRAWAL, req.id, reason)
        assert (await core.store.get_account("A1")).blocked == D("600.00")

    async def test_more_than_spendable(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "500")
        wm = await _method(core)
        with pytest.raises(InsufficientFundsError):
            await core.workflow.submit_withdrawal("A1", D("501"), wm)
        assert core.workflow.list_pending(RequestKind.WITHDRAWAL) == []

    async def test_amount_must_exceed_fee(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "500")
        wm = await _method(core, fee="50", min_amount="0")
        with pytest.raises(InvalidAmountError):
            await core.workflow.submit_withdrawal("A1", D("50"), wm)


class TestKyc:
    async def test_submit_and_approve(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "0")
        req = await core.workflow.submit_kyc("A1", "Asha Rao", "pan.pdf", "application/pdf", 2048)
        assert (await core.store.get_account("A1")).kyc_status == KycStatus.PENDING

        await core.workflow.approve(RequestKind.KYC, req.id)

        account = await core.store.get_account("A1")
        assert account.kyc_status == KycStatus.APPROVED
        assert account.entry_seq == 0

    async def test_reject_without_reason_is_allowed(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "0")
        req = await core.workflow.submit_kyc("A1", "Asha Rao", "id.png", "image/png", 100)
        await core.workflow.reject(RequestKind.KYC, req.id)
        assert (await core.store.get_account("A1")).kyc_status == KycStatus.REJECTED

    async def test_approved_account_cannot_resubmit(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "0")
        req = await core.workflow.submit_kyc("A1", "Asha Rao", "pan.pdf", "application/pdf", 2048)
        await core.workflow.approve(RequestKind.KYC, req.id)

        with pytest.raises(KycAlreadySubmittedError):
            await core.workflow.submit_kyc("A1", "Asha Rao", "new.pdf", "application/pdf", 10)

        assert (await core.store.get_account("A1")).kyc_status == KycStatus.APPROVED
        assert core.workflow.list_pending(RequestKind.KYC) == []

    async def test_one_pending_submission_at_a_time(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "0")
        await core.workflow.submit_kyc("A1", "Asha Rao", "pan.pdf", "application/pdf", 2048)
        with pytest.raises(KycAlreadySubmittedError):
            await core.workflow.submit_kyc("A1", "Asha Rao", "pan.pdf", "application/pdf", 2048)
        assert len(core.workflow.list_pending(RequestKind.KYC)) == 1

    async def test_rejected_account_may_resubmit(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "0")
        req = await core.workflow.submit_kyc("A1", "Asha Rao", "id.png", "image/png", 100)
        await core.workflow.reject(RequestKind.KYC, req.id, "blurry")
        await core.workflow.submit_kyc("A1", "Asha Rao", "id2.png", "image/png", 100)
        assert (await core.store.get_account("A1")).kyc_status == KycStatus.PENDING


class TestNotifications:
    async def test_decision_notifies_account_after_commit(
        self, core: BrokerageCore, fund
    ) -> None:
        await fund(core.store, "A1", "1000")
        wm = await _method(core)
        req = await core.workflow.submit_withdrawal("A1", D("1000"), wm)
        await core.workflow.approve(RequestKind.WITHDRAWAL, req.id)

        inbox = core.inbox.list_for("A1")
        assert inbox[0].title == "Withdrawal approved"
        assert "₹980.00" in inbox[0].message
        assert any(n.title == "New withdrawal request" for n in core.inbox.list_for("ADMIN"))
