"""bk_timed_trade REST API: timers and user timed trades."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.bk_common.response import ApiResponse, request_response
from src.bk_timed_trade.application.schemas import OpenTradeRequest
from src.container import BrokerageCore, get_core

router = APIRouter(tags=["timed-trades"])

Core = Annotated[BrokerageCore, Depends(get_core)]


@router.get("/timers")
async def list_timers(core: Core, request: Request) -> ApiResponse:
    return request_response(core.timed_trades.list_timers(enabled_only=True), request)


@router.post("/accounts/{account_id}/timed-trades")
async def open_trade(
    account_id: str, body: OpenTradeRequest, core: Core, request: Request
) -> ApiResponse:
    data = await core.timed_trades.open(account_id, body.stake, body.duration_minutes)
    return request_response(data, request)


@router.get("/accounts/{account_id}/timed-trades")
async def list_trades(account_id: str, core: Core, request: Request) -> ApiResponse:
    return request_response(core.timed_trades.list_trades(account_id=account_id), request)
