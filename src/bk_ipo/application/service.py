"""IpoService: IPO book, applications and allotment.

    apply    -> block amount                        (PENDING_ALLOTMENT)
    allot    -> release block, debit amount, credit shares   (ALLOTTED)
    reject   -> release block                       (NOT_ALLOTTED)
"""

import logging
from dataclasses import replace

from src.bk_common.datetime_utils import utc_now
from src.bk_common.enums import (
    IpoApplicationStatus,
    IpoStatus,
    LedgerEntryKind,
    NotificationCategory,
)
from src.bk_common.errors import (
    AlreadyDecidedError,
    BelowMinimumInvestmentError,
    IpoApplicationNotFoundError,
    IpoNotFoundError,
    IpoNotLiveError,
)
from src.bk_common.id_generator import generate_id
from src.bk_common.money import money_to_display, require_quantity, to_money
from src.bk_ipo.application.schemas import (
    IpoApplicationResponse,
    IpoRequest,
    IpoResponse,
)
from src.bk_ipo.domain.models import Ipo, IpoApplication
from src.bk_ipo.domain.pricing import application_amount, effective_price
from src.bk_ipo.domain.repository import IpoRepositoryProtocol
from src.bk_ledger.domain.records import RecordCodec
from src.bk_ledger.domain.store import LedgerStore
from src.bk_notify.domain.emitter import NotificationEmitter
from src.bk_position.application.service import PositionService, normalize_symbol

logger = logging.getLogger(__name__)

IPO_RECORDS = RecordCodec("ipo", Ipo, key=lambda i: i.id)
APPLICATION_RECORDS = RecordCodec(
    "ipo_application", IpoApplication, key=lambda a: a.id, owner=lambda a: a.account_id
)


class IpoService:
    def __init__(
        self,
        store: LedgerStore,
        repo: IpoRepositoryProtocol,
        positions: PositionService,
        emitter: NotificationEmitter,
    ) -> None:
        self._store = store
        self._repo = repo
        self._positions = positions
        self._emitter = emitter

    async def restore(self) -> None:
        for record in await self._store.load_records(IPO_RECORDS.record_type):
            self._repo.save_ipo(IPO_RECORDS.decode(record))
        pending = 0
        for record in await self._store.load_records(APPLICATION_RECORDS.record_type):
            application = APPLICATION_RECORDS.decode(record)
            self._repo.save_application(application)
            pending += application.is_pending
        logger.info("IPO book restored: %d application(s) awaiting allotment", pending)

    # ------------------------------------------------------------------
    # IPO book (admin)
    # ------------------------------------------------------------------

    async def add_ipo(self, body: IpoRequest) -> IpoResponse:
        ipo = Ipo(
            id=generate_id("IPO"),
            company_name=body.company_name,
            symbol=normalize_symbol(body.symbol),
            ipo_type=body.ipo_type,
            price_min=to_money(body.price_min),
            price_max=to_money(body.price_max),
            final_price=to_money(body.final_price) if body.final_price else None,
            lot_size=body.lot_size,
            min_investment=to_money(body.min_investment),
            status=body.status,
            discount_type=body.discount_type,
            discount_value=body.discount_value,
            open_date=body.open_date,
            close_date=body.close_date,
            description=body.description,
        )
        await self._save_ipo(ipo)
        logger.info("IPO added: %s %s (%s)", ipo.id, ipo.company_name, ipo.status.value)
        return IpoResponse.from_ipo(ipo)

    async def set_status(self, ipo_id: str, status: IpoStatus) -> IpoResponse:
        current = self._get_ipo(ipo_id)
        previous = current.status
        ipo = replace(current, status=status)
        await self._save_ipo(ipo)
        logger.info("IPO %s status %s -> %s", ipo_id, previous.value, status.value)
        if status == IpoStatus.LIVE and previous != IpoStatus.LIVE:
            await self._emitter.emit_admin(
                NotificationCategory.IPO_ALERTS,
                "IPO open",
                f"{ipo.company_name} is now open for applications",
            )
        return IpoResponse.from_ipo(ipo)

    def get_ipo(self, ipo_id: str) -> IpoResponse:
        return IpoResponse.from_ipo(self._get_ipo(ipo_id))

    def list_ipos(self, status: IpoStatus | None = None) -> list[IpoResponse]:
        return [
            IpoResponse.from_ipo(i)
            for i in self._repo.list_ipos()
            if status is None or i.status == status
        ]

    # ------------------------------------------------------------------
    # Applications
    # ------------------------------------------------------------------

    async def apply(self, account_id: str, ipo_id: str, lots: int) -> IpoApplicationResponse:
        ipo = self._get_ipo(ipo_id)
        if ipo.status != IpoStatus.LIVE:
            raise IpoNotLiveError(ipo_id, ipo.status.value)
        lots = require_quantity(lots)
        amount = application_amount(ipo, lots)
        if amount < ipo.min_investment:
            raise BelowMinimumInvestmentError(amount, ipo.min_investment)

        application = IpoApplication(
            id=generate_id("APP"),
            account_id=account_id,
            ipo_id=ipo.id,
            lots=lots,
            shares=lots * ipo.lot_size,
            price_per_share=effective_price(ipo),
            amount=amount,
            status=IpoApplicationStatus.PENDING_ALLOTMENT,
            applied_at=utc_now(),
        )
        async with self._store.transaction(account_id) as txn:
            txn.require_enabled()
            await txn.block(
                amount, LedgerEntryKind.IPO_BLOCK, application.id, f"IPO bid {ipo.company_name}"
            )
            txn.persist(
                APPLICATION_RECORDS.encode(application),
                lambda: self._repo.save_application(application),
            )

        logger.info(
            "IPO application %s: %s %d lots of %s, blocked %s",
            application.id, account_id, lots, ipo.id, amount,
        )
        await self._emitter.emit(
            account_id,
            NotificationCategory.IPO_ALERTS,
            "IPO application received",
            f"{money_to_display(amount)} blocked for {lots} lot(s) of {ipo.company_name}",
        )
        return IpoApplicationResponse.from_application(application)

    async def allot(
        self, application_id: str, decided_by: str | None = None
    ) -> IpoApplicationResponse:
        return await self._decide(application_id, allot=True, decided_by=decided_by)

    async def reject(
        self, application_id: str, decided_by: str | None = None
    ) -> IpoApplicationResponse:
        return await self._decide(application_id, allot=False, decided_by=decided_by)

    def list_applications(
        self,
        ipo_id: str | None = None,
        account_id: str | None = None,
        status: IpoApplicationStatus | None = None,
    ) -> list[IpoApplicationResponse]:
        return [
            IpoApplicationResponse.from_application(a)
            for a in self._repo.list_applications(ipo_id, account_id, status)
        ]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _save_ipo(self, ipo: Ipo) -> None:
        await self._store.save_record(IPO_RECORDS.encode(ipo))
        self._repo.save_ipo(ipo)

    def _get_ipo(self, ipo_id: str) -> Ipo:
        ipo = self._repo.get_ipo(ipo_id)
        if ipo is None:
            raise IpoNotFoundError(ipo_id)
        return ipo

    def _get_application(self, application_id: str) -> IpoApplication:
        application = self._repo.get_application(application_id)
        if application is None:
            raise IpoApplicationNotFoundError(application_id)
        return application

    async def _decide(
        self, application_id: str, allot: bool, decided_by: str | None
    ) -> IpoApplicationResponse:
        application = self._get_application(application_id)
        ipo = self._get_ipo(application.ipo_id)

        async with self._store.transaction(application.account_id) as txn:
            current = self._get_application(application_id)
            if not current.is_pending:
                raise AlreadyDecidedError(application_id, current.status.value)
            await txn.release(
                current.amount, LedgerEntryKind.IPO_RELEASE, current.id,
                "IPO allotted" if allot else "IPO not allotted",
            )
            if allot:
                await txn.debit(
                    current.amount, LedgerEntryKind.IPO_DEBIT, current.id,
                    f"IPO allotment {ipo.company_name}",
                )
                self._positions.stage_allotment(
                    txn, ipo.symbol, current.shares, current.price_per_share
                )
            decided = replace(
                current,
                status=(
                    IpoApplicationStatus.ALLOTTED if allot else IpoApplicationStatus.NOT_ALLOTTED
                ),
                decided_at=utc_now(),
                decided_by=decided_by,
            )
            txn.persist(
                APPLICATION_RECORDS.encode(decided),
                lambda: self._repo.save_application(decided),
            )

        logger.info(
            "IPO application %s %s (account=%s amount=%s)",
            decided.id, decided.status.value, decided.account_id, decided.amount,
        )
        if allot:
            message = (
                f"You have been allotted {decided.shares} shares of {ipo.company_name}. "
                f"{money_to_display(decided.amount)} has been debited."
            )
        else:
            message = (
                f"Your application for {ipo.company_name} was not allotted. "
                f"{money_to_display(decided.amount)} has been released."
            )
        await self._emitter.emit(
            decided.account_id,
            NotificationCategory.IPO_ALERTS,
            "IPO allotted" if allot else "IPO not allotted",
            message,
        )
        return IpoApplicationResponse.from_application(decided)
