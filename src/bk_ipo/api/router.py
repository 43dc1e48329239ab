"""bk_ipo REST API: IPO listings and user applications."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.bk_common.enums import IpoStatus
from src.bk_common.response import ApiResponse, request_response
from src.bk_ipo.application.schemas import ApplyIpoRequest
from src.container import BrokerageCore, get_core

router = APIRouter(tags=["ipo"])

Core = Annotated[BrokerageCore, Depends(get_core)]


@router.get("/ipos")
async def list_ipos(
    core: Core,
    request: Request,
    status: IpoStatus | None = Query(None),
) -> ApiResponse:
    return request_response(core.ipo.list_ipos(status), request)


@router.get("/ipos/{ipo_id}")
async def get_ipo(ipo_id: str, core: Core, request: Request) -> ApiResponse:
    return request_response(core.ipo.get_ipo(ipo_id), request)


@router.post("/accounts/{account_id}/ipos/{ipo_id}/applications")
async def apply_ipo(
    account_id: str, ipo_id: str, body: ApplyIpoRequest, core: Core, request: Request
) -> ApiResponse:
    data = await core.ipo.apply(account_id, ipo_id, body.lots)
    return request_response(data, request)


@router.get("/accounts/{account_id}/ipo-applications")
async def list_applications(account_id: str, core: Core, request: Request) -> ApiResponse:
    return request_response(core.ipo.list_applications(account_id=account_id), request)
