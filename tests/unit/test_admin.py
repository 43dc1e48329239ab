"""Unit tests for AdminService: account lifecycle, adjustments, work queue."""

from decimal import Decimal

import pytest

from src.bk_common.enums import AccountStatus, RequestKind
from src.bk_common.errors import InsufficientFundsError
from src.bk_workflow.application.schemas import GatewayRequest
from src.container import BrokerageCore

D = Decimal


class TestAccountLifecycle:
    async def test_registration_is_pending_until_approved(self, core: BrokerageCore) -> None:
        opened = await core.ledger.open_account("A1")
        assert opened.status == "PENDING"
        assert core.inbox.list_for("ADMIN")[0].title == "New registration"

        approved = await core.admin.approve_account("A1")

        assert approved.status == "ACTIVE"
        assert core.inbox.list_for("A1")[0].title == "Account approved"

    async def test_disable_keeps_balance(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "250")
        disabled = await core.admin.disable_account("A1")
        assert disabled.status == AccountStatus.DISABLED.value
        assert disabled.balance == D("250.00")


class TestAdjustBalance:
    async def test_credit_and_debit(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "100")

        credited = await core.admin.adjust_balance("A1", D("50"), "CREDIT", "bonus")
        debited = await core.admin.adjust_balance("A1", D("30"), "DEBIT", "correction")

        assert credited["entry"]["kind"] == "ADJUSTMENT"
        assert credited["entry"]["amount"] == "50.00"
        assert debited["account"]["balance"] == "120.00"

    async def test_debit_cannot_overdraw(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "100")
        with pytest.raises(InsufficientFundsError):
            await core.admin.adjust_balance("A1", D("100.01"), "DEBIT", "correction")


class TestWorkQueue:
    async def test_pending_overview_counts(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "1000")
        gw = await core.workflow.add_gateway(GatewayRequest(name="UPI", address="pay@bank"))
        await core.workflow.submit_deposit("A1", D("100"), gw.id)
        await core.timed_trades.open("A1", D("10"), 1)

        overview = core.admin.pending_overview()

        assert overview["counts"]["deposits"] == 1
        assert overview["counts"]["withdrawals"] == 0
        assert overview["counts"]["timed_trades"] == 1
        assert overview["deposits"][0]["kind"] == RequestKind.DEPOSIT.value

    async def test_invariant_audit(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "1000")
        await fund(core.store, "A2", "10")
        report = await core.admin.verify_all_invariants()
        assert report == {"ok": True, "accounts_checked": 2, "violations": []}
