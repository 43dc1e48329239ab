"""Composition root: builds one BrokerageCore per application instance.

Every service receives the same LedgerStore explicitly; nothing reaches
for a module-level store. Routers obtain the core from ``app.state``.
The services keep their records in memory and write them through the
LedgerStore, which is durable with LEDGER_BACKEND=sql.
"""

from dataclasses import dataclass

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine

from config.settings import Settings
from src.bk_admin.application.service import AdminService
from src.bk_common.database import build_engine, build_session_factory
from src.bk_ipo.application.service import IpoService
from src.bk_ipo.infrastructure.memory import InMemoryIpoRepository
from src.bk_ledger.application.service import LedgerApplicationService
from src.bk_ledger.domain.repository import LedgerRepositoryProtocol
from src.bk_ledger.domain.store import LedgerStore
from src.bk_ledger.infrastructure.memory import InMemoryLedgerRepository
from src.bk_ledger.infrastructure.persistence import SqlLedgerRepository
from src.bk_notify.domain.emitter import NotificationEmitter
from src.bk_notify.infrastructure.sinks import InMemoryInbox, LoggingSink
from src.bk_position.application.service import PositionService
from src.bk_position.infrastructure.memory import InMemoryPositionRepository
from src.bk_position.infrastructure.price_book import StaticPriceBook
from src.bk_timed_trade.application.service import TimedTradeService, default_label
from src.bk_timed_trade.domain.models import Timer, TradingSettings
from src.bk_timed_trade.infrastructure.memory import InMemoryTimedTradeRepository
from src.bk_workflow.application.service import WorkflowService
from src.bk_workflow.domain.state_machine import DEFAULT_POLICIES, WorkflowEngine
from src.bk_workflow.infrastructure.memory import (
    InMemoryPaymentConfigRepository,
    InMemoryRequestRepository,
)


@dataclass
class BrokerageCore:
    store: LedgerStore
    emitter: NotificationEmitter
    inbox: InMemoryInbox
    prices: StaticPriceBook
    ledger: LedgerApplicationService
    workflow: WorkflowService
    positions: PositionService
    ipo: IpoService
    timed_trades: TimedTradeService
    admin: AdminService
    engine: AsyncEngine | None = None

    async def restore(self) -> None:
        """Reload requests, applications, trades, positions and admin config.

        Run once at startup, before serving, so every open hold in the ledger
        has its pending record back in the service that decides it.
        """
        await self.workflow.restore()
        await self.positions.restore()
        await self.ipo.restore()
        await self.timed_trades.restore()


def _ledger_repository(
    settings: Settings,
) -> tuple[LedgerRepositoryProtocol, AsyncEngine | None]:
    if settings.LEDGER_BACKEND == "sql":
        engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)
        return SqlLedgerRepository(build_session_factory(engine)), engine
    return InMemoryLedgerRepository(), None


def build_core(
    settings: Settings, ledger_repo: LedgerRepositoryProtocol | None = None
) -> BrokerageCore:
    engine = None
    if ledger_repo is None:
        ledger_repo, engine = _ledger_repository(settings)
    store = LedgerStore(ledger_repo)
    inbox = InMemoryInbox()
    emitter = NotificationEmitter([inbox, LoggingSink()])
    prices = StaticPriceBook()

    ledger = LedgerApplicationService(store, emitter)
    workflow = WorkflowService(
        store,
        WorkflowEngine(store, InMemoryRequestRepository(), DEFAULT_POLICIES),
        InMemoryPaymentConfigRepository(),
        emitter,
    )
    positions = PositionService(store, InMemoryPositionRepository(), prices.get)
    ipo = IpoService(store, InMemoryIpoRepository(), positions, emitter)
    timed_trades = TimedTradeService(
        store,
        InMemoryTimedTradeRepository(
            TradingSettings(
                profit_rate=settings.DEFAULT_PROFIT_RATE,
                currency_code=settings.CURRENCY_CODE,
                currency_symbol=settings.CURRENCY_SYMBOL,
            ),
            [Timer(m, default_label(m)) for m in settings.DEFAULT_TIMER_MINUTES],
        ),
        emitter,
    )
    return BrokerageCore(
        store=store,
        emitter=emitter,
        inbox=inbox,
        prices=prices,
        ledger=ledger,
        workflow=workflow,
        positions=positions,
        ipo=ipo,
        timed_trades=timed_trades,
        admin=AdminService(ledger, workflow, ipo, timed_trades),
        engine=engine,
    )


def get_core(request: Request) -> BrokerageCore:
    """FastAPI dependency."""
    return request.app.state.core
