"""bk_position REST API: order execution and portfolio."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.bk_common.response import ApiResponse, request_response
from src.bk_position.application.schemas import OrderRequest
from src.container import BrokerageCore, get_core

router = APIRouter(prefix="/accounts/{account_id}", tags=["portfolio"])

Core = Annotated[BrokerageCore, Depends(get_core)]


@router.post("/orders")
async def place_order(
    account_id: str, body: OrderRequest, core: Core, request: Request
) -> ApiResponse:
    data = await core.positions.execute_order(
        account_id, body.side, body.symbol, body.quantity, body.price, body.order_id
    )
    return request_response(data, request)


@router.get("/orders")
async def list_orders(account_id: str, core: Core, request: Request) -> ApiResponse:
    return request_response(core.positions.list_executions(account_id), request)


@router.get("/portfolio")
async def get_portfolio(account_id: str, core: Core, request: Request) -> ApiResponse:
    data = await core.positions.portfolio_summary(account_id)
    return request_response(data, request)
