"""Shared test fixtures."""

from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient

from config.settings import Settings
from src.bk_common.enums import AccountStatus, LedgerEntryKind
from src.bk_ledger.domain.store import LedgerStore
from src.bk_ledger.infrastructure.memory import InMemoryLedgerRepository
from src.container import BrokerageCore, build_core
from src.main import create_app


@pytest.fixture
def settings() -> Settings:
    return Settings(LEDGER_BACKEND="memory", LOG_LEVEL="WARNING")


@pytest.fixture
def core(settings: Settings) -> BrokerageCore:
    """A fresh, fully wired in-memory core per test."""
    return build_core(settings)


@pytest.fixture
def store() -> LedgerStore:
    return LedgerStore(InMemoryLedgerRepository())


@pytest.fixture
async def client(settings: Settings, core: BrokerageCore) -> AsyncClient:
    """Async HTTP client against an app bound to the test's core."""
    app = create_app(settings, core)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def _fund(store: LedgerStore, account_id: str, amount: str) -> None:
    await store.open_account(account_id, AccountStatus.ACTIVE)
    if Decimal(amount) > 0:
        await store.credit(
            account_id, Decimal(amount), LedgerEntryKind.DEPOSIT, f"seed-{account_id}"
        )


@pytest.fixture
def fund():  # type: ignore[no-untyped-def]
    """Open an ACTIVE account and credit it without going through a workflow."""
    return _fund
