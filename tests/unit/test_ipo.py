"""Unit tests for IPO pricing, application and allotment."""

from decimal import Decimal

import pytest

from src.bk_common.enums import DiscountType, IpoStatus
from src.bk_common.errors import (
    AlreadyDecidedError,
    BelowMinimumInvestmentError,
    InsufficientFundsError,
    IpoNotLiveError,
)
from src.bk_ipo.application.schemas import IpoRequest
from src.bk_ipo.domain.models import Ipo
from src.bk_ipo.domain.pricing import application_amount, effective_price
from src.bk_ledger.domain.invariants import verify_conservation
from src.container import BrokerageCore

D = Decimal


def _ipo(**overrides: object) -> Ipo:
    fields: dict[str, object] = {
        "id": "IPO1",
        "company_name": "Acme Ltd",
        "symbol": "ACME",
        "ipo_type": "Mainline",
        "price_min": D("100.00"),
        "price_max": D("110.00"),
        "lot_size": 50,
        "min_investment": D("0.00"),
        "status": IpoStatus.LIVE,
    }
    fields.update(overrides)
    return Ipo(**fields)  # type: ignore[arg-type]


async def _live_ipo(core: BrokerageCore, **overrides: object) -> str:
    body = {
        "company_name": "Acme Ltd",
        "symbol": "acme",
        "price_min": D("100.00"),
        "price_max": D("110.00"),
        "lot_size": 50,
        "status": IpoStatus.LIVE,
    }
    body.update(overrides)
    return (await core.ipo.add_ipo(IpoRequest(**body))).id  # type: ignore[arg-type]


class TestPricing:
    def test_band_low_end_without_final_price(self) -> None:
        assert effective_price(_ipo()) == D("100.00")

    def test_final_price_wins(self) -> None:
        assert effective_price(_ipo(final_price=D("108.00"))) == D("108.00")

    def test_percentage_discount(self) -> None:
        ipo = _ipo(discount_type=DiscountType.PERCENTAGE, discount_value=D("10"))
        assert effective_price(ipo) == D("90.00")

    def test_fixed_discount_floors_at_zero(self) -> None:
        ipo = _ipo(discount_type=DiscountType.FIXED, discount_value=D("150"))
        assert effective_price(ipo) == D("0.00")

    def test_application_amount(self) -> None:
        assert application_amount(_ipo(), 2) == D("10000.00")


class TestApply:
    async def test_blocks_lots_times_lot_size_times_price(
        self, core: BrokerageCore, fund
    ) -> None:
        await fund(core.store, "A1", "20000")
        ipo_id = await _live_ipo(core)

        app = await core.ipo.apply("A1", ipo_id, 2)

        assert app.amount == D("10000.00")
        assert app.shares == 100
        assert app.status == "PENDING_ALLOTMENT"
        account = await core.store.get_account("A1")
        assert account.blocked == D("10000.00")
        assert account.spendable == D("10000.00")

    async def test_not_live(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "20000")
        ipo_id = await _live_ipo(core, status=IpoStatus.UPCOMING)
        with pytest.raises(IpoNotLiveError):
            await core.ipo.apply("A1", ipo_id, 1)

    async def test_below_minimum_investment(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "20000")
        ipo_id = await _live_ipo(core, min_investment=D("15000"))
        with pytest.raises(BelowMinimumInvestmentError):
            await core.ipo.apply("A1", ipo_id, 2)
        assert (await core.store.get_account("A1")).blocked == D("0.00")

    async def test_insufficient_funds_records_nothing(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "1000")
        ipo_id = await _live_ipo(core)
        with pytest.raises(InsufficientFundsError):
            await core.ipo.apply("A1", ipo_id, 1)
        assert core.ipo.list_applications(account_id="A1") == []


class TestAllotment:
    async def test_allot_debits_and_credits_shares(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "20000")
        ipo_id = await _live_ipo(core)
        app = await core.ipo.apply("A1", ipo_id, 2)

        decided = await core.ipo.allot(app.id, "admin-1")

        assert decided.status == "ALLOTTED"
        account = await core.store.get_account("A1")
        assert account.balance == D("10000.00")
        assert account.blocked == D("0.00")
        [position] = core.positions.list_positions("A1")
        assert position.symbol == "ACME"
        assert position.quantity == 100
        assert position.avg_cost == D("100.00")
        assert await verify_conservation(core.store.repo) == []

    async def test_reject_releases_block(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "20000")
        ipo_id = await _live_ipo(core)
        app = await core.ipo.apply("A1", ipo_id, 2)

        decided = await core.ipo.reject(app.id)

        assert decided.status == "NOT_ALLOTTED"
        account = await core.store.get_account("A1")
        assert account.balance == D("20000.00")
        assert account.spendable == D("20000.00")
        assert core.positions.list_positions("A1") == []

    async def test_second_decision_is_refused(self, core: BrokerageCore, fund) -> None:
        await fund(core.store, "A1", "20000")
        ipo_id = await _live_ipo(core)
        app = await core.ipo.apply("A1", ipo_id, 1)
        await core.ipo.allot(app.id)
        with pytest.raises(AlreadyDecidedError):
            await core.ipo.reject(app.id)
        assert core.positions.list_positions("A1")[0].quantity == 50

    async def test_going_live_alerts_admin(self, core: BrokerageCore) -> None:
        ipo_id = await _live_ipo(core, status=IpoStatus.UPCOMING)
        await core.ipo.set_status(ipo_id, IpoStatus.LIVE)
        assert core.inbox.list_for("ADMIN")[0].title == "IPO open"
