"""bk_ledger REST API: registration, balance and ledger history."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.bk_common.response import ApiResponse, request_response
from src.container import BrokerageCore, get_core

router = APIRouter(prefix="/accounts", tags=["accounts"])

Core = Annotated[BrokerageCore, Depends(get_core)]


@router.post("/{account_id}")
async def open_account(account_id: str, core: Core, request: Request) -> ApiResponse:
    data = await core.ledger.open_account(account_id)
    return request_response(data, request)


@router.get("/{account_id}/balance")
async def get_balance(account_id: str, core: Core, request: Request) -> ApiResponse:
    data = await core.ledger.get_balance(account_id)
    return request_response(data, request)


@router.get("/{account_id}/ledger")
async def list_ledger(
    account_id: str,
    core: Core,
    request: Request,
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    kind: str | None = Query(None, description="Filter by LedgerEntryKind"),
) -> ApiResponse:
    data = await core.ledger.list_ledger(account_id, cursor, limit, kind)
    return request_response(data, request)
