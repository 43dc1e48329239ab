"""AdminService: the command surface administrators act through.

Each command delegates to the owning module's service; this class adds the
cross-module views (pending work queue, invariant audit).
"""

import logging
from decimal import Decimal
from typing import Any

from src.bk_common.enums import (
    AccountStatus,
    IpoApplicationStatus,
    RequestKind,
    TradeResult,
)
from src.bk_ipo.application.schemas import IpoApplicationResponse
from src.bk_ipo.application.service import IpoService
from src.bk_ledger.application.schemas import AccountResponse, LedgerEntryItem
from src.bk_ledger.application.service import LedgerApplicationService
from src.bk_timed_trade.application.schemas import TimedTradeResponse
from src.bk_timed_trade.application.service import TimedTradeService
from src.bk_workflow.application.schemas import RequestResponse
from src.bk_workflow.application.service import WorkflowService

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(
        self,
        ledger: LedgerApplicationService,
        workflow: WorkflowService,
        ipo: IpoService,
        timed_trades: TimedTradeService,
    ) -> None:
        self._ledger = ledger
        self._workflow = workflow
        self._ipo = ipo
        self._timed_trades = timed_trades

    # --- deposits / withdrawals / KYC ---

    async def approve_deposit(
        self, request_id: str, admin_id: str | None = None
    ) -> RequestResponse:
        return await self._workflow.approve(RequestKind.DEPOSIT, request_id, admin_id)

    async def reject_deposit(
        self, request_id: str, reason: str | None = None, admin_id: str | None = None
    ) -> RequestResponse:
        return await self._workflow.reject(RequestKind.DEPOSIT, request_id, reason, admin_id)

    async def approve_withdrawal(
        self, request_id: str, admin_id: str | None = None
    ) -> RequestResponse:
        return await self._workflow.approve(RequestKind.WITHDRAWAL, request_id, admin_id)

    async def reject_withdrawal(
        self, request_id: str, reason: str, admin_id: str | None = None
    ) -> RequestResponse:
        return await self._workflow.reject(RequestKind.WITHDRAWAL, request_id, reason, admin_id)

    async def approve_kyc(self, request_id: str, admin_id: str | None = None) -> RequestResponse:
        return await self._workflow.approve(RequestKind.KYC, request_id, admin_id)

    async def reject_kyc(
        self, request_id: str, reason: str | None = None, admin_id: str | None = None
    ) -> RequestResponse:
        return await self._workflow.reject(RequestKind.KYC, request_id, reason, admin_id)

    # --- IPO / timed trades ---

    async def allot_ipo(
        self, application_id: str, admin_id: str | None = None
    ) -> IpoApplicationResponse:
        return await self._ipo.allot(application_id, admin_id)

    async def reject_ipo(
        self, application_id: str, admin_id: str | None = None
    ) -> IpoApplicationResponse:
        return await self._ipo.reject(application_id, admin_id)

    async def set_trade_result(
        self, trade_id: str, result: TradeResult, admin_id: str | None = None
    ) -> TimedTradeResponse:
        return await self._timed_trades.set_result(trade_id, result, admin_id)

    # --- accounts ---

    async def approve_account(self, account_id: str) -> AccountResponse:
        return await self._ledger.set_account_status(account_id, AccountStatus.ACTIVE)

    async def disable_account(self, account_id: str) -> AccountResponse:
        return await self._ledger.set_account_status(account_id, AccountStatus.DISABLED)

    async def adjust_balance(
        self, account_id: str, amount: Decimal, direction: str, reason: str
    ) -> dict[str, Any]:
        account, entry = await self._ledger.adjust_balance(account_id, amount, direction, reason)
        return {
            "account": account.model_dump(mode="json"),
            "entry": LedgerEntryItem.from_entry(entry).model_dump(mode="json"),
        }

    # --- cross-module views ---

    def pending_overview(self) -> dict[str, Any]:
        """Everything waiting on an administrator, grouped by queue."""
        deposits = self._workflow.list_pending(RequestKind.DEPOSIT)
        withdrawals = self._workflow.list_pending(RequestKind.WITHDRAWAL)
        kycs = self._workflow.list_pending(RequestKind.KYC)
        ipo_apps = self._ipo.list_applications(status=IpoApplicationStatus.PENDING_ALLOTMENT)
        trades = self._timed_trades.list_trades(status=TradeResult.PENDING)
        overdue = self._timed_trades.list_overdue()
        return {
            "counts": {
                "deposits": len(deposits),
                "withdrawals": len(withdrawals),
                "kyc": len(kycs),
                "ipo_applications": len(ipo_apps),
                "timed_trades": len(trades),
                "overdue_timed_trades": len(overdue),
            },
            "deposits": [d.model_dump(mode="json") for d in deposits],
            "withdrawals": [w.model_dump(mode="json") for w in withdrawals],
            "kyc": [k.model_dump(mode="json") for k in kycs],
            "ipo_applications": [a.model_dump(mode="json") for a in ipo_apps],
            "timed_trades": [t.model_dump(mode="json") for t in trades],
            "overdue_timed_trades": [t.model_dump(mode="json") for t in overdue],
        }

    async def verify_all_invariants(self) -> dict[str, object]:
        """Run the per-account conservation audit over the whole ledger."""
        report = await self._ledger.audit()
        if not report.ok:
            logger.error("Invariant audit found %d violation(s)", len(report.violations))
        return report.model_dump(mode="json")
