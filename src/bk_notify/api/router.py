"""bk_notify REST API: per-account notification inbox."""

from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.bk_common.response import ApiResponse, request_response
from src.container import BrokerageCore, get_core

router = APIRouter(prefix="/accounts/{account_id}/notifications", tags=["notifications"])

Core = Annotated[BrokerageCore, Depends(get_core)]


@router.get("")
async def list_notifications(
    account_id: str,
    core: Core,
    request: Request,
    unread_only: bool = Query(False),
) -> ApiResponse:
    items = [
        {**asdict(n), "category": n.category.value, "created_at": n.created_at.isoformat()}
        for n in core.inbox.list_for(account_id, unread_only)
    ]
    return request_response(
        {"items": items, "unread": core.inbox.unread_count(account_id)}, request
    )


@router.post("/{notification_id}/read")
async def mark_read(
    account_id: str, notification_id: str, core: Core, request: Request
) -> ApiResponse:
    return request_response({"updated": core.inbox.mark_read(account_id, notification_id)}, request)


@router.post("/read-all")
async def mark_all_read(account_id: str, core: Core, request: Request) -> ApiResponse:
    return request_response({"updated": core.inbox.mark_all_read(account_id)}, request)
