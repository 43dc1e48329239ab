"""Admin REST API.

Authentication is handled in front of this service; the acting admin is
passed through as the optional ``X-Admin-Id`` header and recorded on
decisions.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Header, Query, Request

from src.bk_common.enums import IpoApplicationStatus, RequestKind
from src.bk_common.response import ApiResponse, request_response
from src.bk_ipo.application.schemas import IpoRequest, IpoStatusRequest
from src.bk_ledger.application.schemas import AdjustBalanceRequest
from src.bk_position.application.schemas import SetPriceRequest
from src.bk_timed_trade.application.schemas import (
    SetResultRequest,
    TimerRequest,
    TimerToggleRequest,
    TradingSettingsRequest,
)
from src.bk_workflow.application.schemas import (
    GatewayRequest,
    RejectRequest,
    WithdrawalMethodRequest,
)
from src.container import BrokerageCore, get_core

router = APIRouter(prefix="/admin", tags=["admin"])

Core = Annotated[BrokerageCore, Depends(get_core)]
AdminId = Annotated[str | None, Header(alias="X-Admin-Id")]


# ---------------------------------------------------------------------------
# Work queue and audit
# ---------------------------------------------------------------------------


@router.get("/pending")
async def pending_overview(core: Core, request: Request) -> ApiResponse:
    return request_response(core.admin.pending_overview(), request)


@router.get("/invariants")
async def verify_invariants(core: Core, request: Request) -> ApiResponse:
    return request_response(await core.admin.verify_all_invariants(), request)


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


@router.post("/accounts/{account_id}/approve")
async def approve_account(account_id: str, core: Core, request: Request) -> ApiResponse:
    return request_response(await core.admin.approve_account(account_id), request)


@router.post("/accounts/{account_id}/disable")
async def disable_account(account_id: str, core: Core, request: Request) -> ApiResponse:
    return request_response(await core.admin.disable_account(account_id), request)


@router.post("/accounts/{account_id}/adjust")
async def adjust_balance(
    account_id: str, body: AdjustBalanceRequest, core: Core, request: Request
) -> ApiResponse:
    data = await core.admin.adjust_balance(account_id, body.amount, body.direction, body.reason)
    return request_response(data, request)


# ---------------------------------------------------------------------------
# Deposits / withdrawals / KYC
# ---------------------------------------------------------------------------


@router.get("/deposits")
async def pending_deposits(core: Core, request: Request) -> ApiResponse:
    return request_response(core.workflow.list_pending(RequestKind.DEPOSIT), request)


@router.post("/deposits/{request_id}/approve")
async def approve_deposit(
    request_id: str, core: Core, request: Request, admin_id: AdminId = None
) -> ApiResponse:
    return request_response(await core.admin.approve_deposit(request_id, admin_id), request)


@router.post("/deposits/{request_id}/reject")
async def reject_deposit(
    request_id: str,
    body: RejectRequest,
    core: Core,
    request: Request,
    admin_id: AdminId = None,
) -> ApiResponse:
    data = await core.admin.reject_deposit(request_id, body.reason, admin_id)
    return request_response(data, request)


@router.get("/withdrawals")
async def pending_withdrawals(core: Core, request: Request) -> ApiResponse:
    return request_response(core.workflow.list_pending(RequestKind.WITHDRAWAL), request)


@router.post("/withdrawals/{request_id}/approve")
async def approve_withdrawal(
    request_id: str, core: Core, request: Request, admin_id: AdminId = None
) -> ApiResponse:
    return request_response(await core.admin.approve_withdrawal(request_id, admin_id), request)


@router.post("/withdrawals/{request_id}/reject")
async def reject_withdrawal(
    request_id: str,
    body: RejectRequest,
    core: Core,
    request: Request,
    admin_id: AdminId = None,
) -> ApiResponse:
    data = await core.admin.reject_withdrawal(request_id, body.reason or "", admin_id)
    return request_response(data, request)


@router.get("/kyc")
async def pending_kyc(core: Core, request: Request) -> ApiResponse:
    return request_response(core.workflow.list_pending(RequestKind.KYC), request)


@router.post("/kyc/{request_id}/approve")
async def approve_kyc(
    request_id: str, core: Core, request: Request, admin_id: AdminId = None
) -> ApiResponse:
    return request_response(await core.admin.approve_kyc(request_id, admin_id), request)


@router.post("/kyc/{request_id}/reject")
async def reject_kyc(
    request_id: str,
    body: RejectRequest,
    core: Core,
    request: Request,
    admin_id: AdminId = None,
) -> ApiResponse:
    data = await core.admin.reject_kyc(request_id, body.reason, admin_id)
    return request_response(data, request)


# ---------------------------------------------------------------------------
# Payment configuration
# ---------------------------------------------------------------------------


@router.get("/payment-gateways")
async def list_gateways(core: Core, request: Request) -> ApiResponse:
    return request_response(core.workflow.list_gateways(), request)


@router.post("/payment-gateways")
async def add_gateway(body: GatewayRequest, core: Core, request: Request) -> ApiResponse:
    return request_response(await core.workflow.add_gateway(body), request)


@router.put("/payment-gateways/{gateway_id}")
async def update_gateway(
    gateway_id: str, body: GatewayRequest, core: Core, request: Request
) -> ApiResponse:
    return request_response(await core.workflow.update_gateway(gateway_id, body), request)


@router.post("/payment-gateways/{gateway_id}/deactivate")
async def deactivate_gateway(gateway_id: str, core: Core, request: Request) -> ApiResponse:
    return request_response(await core.workflow.set_gateway_active(gateway_id, False), request)


@router.get("/withdrawal-methods")
async def list_methods(core: Core, request: Request) -> ApiResponse:
    return request_response(core.workflow.list_methods(), request)


@router.post("/withdrawal-methods")
async def add_method(body: WithdrawalMethodRequest, core: Core, request: Request) -> ApiResponse:
    return request_response(await core.workflow.add_method(body), request)


@router.put("/withdrawal-methods/{method_id}")
async def update_method(
    method_id: str, body: WithdrawalMethodRequest, core: Core, request: Request
) -> ApiResponse:
    return request_response(await core.workflow.update_method(method_id, body), request)


@router.post("/withdrawal-methods/{method_id}/deactivate")
async def deactivate_method(method_id: str, core: Core, request: Request) -> ApiResponse:
    return request_response(await core.workflow.set_method_active(method_id, False), request)


# ---------------------------------------------------------------------------
# IPOs
# ---------------------------------------------------------------------------


@router.post("/ipos")
async def add_ipo(body: IpoRequest, core: Core, request: Request) -> ApiResponse:
    return request_response(await core.ipo.add_ipo(body), request)


@router.post("/ipos/{ipo_id}/status")
async def set_ipo_status(
    ipo_id: str, body: IpoStatusRequest, core: Core, request: Request
) -> ApiResponse:
    return request_response(await core.ipo.set_status(ipo_id, body.status), request)


@router.get("/ipo-applications")
async def list_ipo_applications(
    core: Core,
    request: Request,
    ipo_id: str | None = Query(None),
    status: IpoApplicationStatus | None = Query(None),
) -> ApiResponse:
    return request_response(core.ipo.list_applications(ipo_id=ipo_id, status=status), request)


@router.post("/ipo-applications/{application_id}/allot")
async def allot_ipo(
    application_id: str, core: Core, request: Request, admin_id: AdminId = None
) -> ApiResponse:
    return request_response(await core.admin.allot_ipo(application_id, admin_id), request)


@router.post("/ipo-applications/{application_id}/reject")
async def reject_ipo(
    application_id: str, core: Core, request: Request, admin_id: AdminId = None
) -> ApiResponse:
    return request_response(await core.admin.reject_ipo(application_id, admin_id), request)


# ---------------------------------------------------------------------------
# Timed trades, timers, trading settings
# ---------------------------------------------------------------------------


@router.get("/timed-trades")
async def list_timed_trades(
    core: Core, request: Request, overdue_only: bool = Query(False)
) -> ApiResponse:
    if overdue_only:
        return request_response(core.timed_trades.list_overdue(), request)
    return request_response(core.timed_trades.list_trades(), request)


@router.post("/timed-trades/{trade_id}/result")
async def set_trade_result(
    trade_id: str,
    body: SetResultRequest,
    core: Core,
    request: Request,
    admin_id: AdminId = None,
) -> ApiResponse:
    data = await core.admin.set_trade_result(trade_id, body.result, admin_id)
    return request_response(data, request)


@router.get("/timers")
async def list_timers(core: Core, request: Request) -> ApiResponse:
    return request_response(core.timed_trades.list_timers(), request)


@router.post("/timers")
async def add_timer(body: TimerRequest, core: Core, request: Request) -> ApiResponse:
    data = await core.timed_trades.add_timer(body.duration_minutes, body.label, body.is_enabled)
    return request_response(data, request)


@router.post("/timers/{duration_minutes}/toggle")
async def toggle_timer(
    duration_minutes: int, body: TimerToggleRequest, core: Core, request: Request
) -> ApiResponse:
    data = await core.timed_trades.set_timer_enabled(duration_minutes, body.is_enabled)
    return request_response(data, request)


@router.delete("/timers/{duration_minutes}")
async def remove_timer(duration_minutes: int, core: Core, request: Request) -> ApiResponse:
    await core.timed_trades.remove_timer(duration_minutes)
    return request_response({"removed": duration_minutes}, request)


@router.get("/trading-settings")
async def get_trading_settings(core: Core, request: Request) -> ApiResponse:
    return request_response(core.timed_trades.get_settings(), request)


@router.put("/trading-settings")
async def update_trading_settings(
    body: TradingSettingsRequest, core: Core, request: Request
) -> ApiResponse:
    data = await core.timed_trades.update_settings(
        body.profit_rate, body.currency_code, body.currency_symbol
    )
    return request_response(data, request)


# ---------------------------------------------------------------------------
# Display prices
# ---------------------------------------------------------------------------


@router.put("/prices/{symbol}")
async def set_price(
    symbol: str, body: SetPriceRequest, core: Core, request: Request
) -> ApiResponse:
    price = core.prices.set_price(symbol, body.price)
    return request_response({"symbol": symbol.upper(), "price": str(price)}, request)
