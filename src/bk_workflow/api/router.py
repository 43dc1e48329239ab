"""bk_workflow REST API: user-side deposit, withdrawal and KYC requests."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.bk_common.enums import RequestKind
from src.bk_common.response import ApiResponse, request_response
from src.bk_workflow.application.schemas import (
    SubmitDepositRequest,
    SubmitKycRequest,
    SubmitWithdrawalRequest,
)
from src.container import BrokerageCore, get_core

router = APIRouter(tags=["wallet"])

Core = Annotated[BrokerageCore, Depends(get_core)]


@router.get("/payment-gateways")
async def list_gateways(core: Core, request: Request) -> ApiResponse:
    return request_response(core.workflow.list_gateways(active_only=True), request)


@router.get("/withdrawal-methods")
async def list_withdrawal_methods(core: Core, request: Request) -> ApiResponse:
    return request_response(core.workflow.list_methods(active_only=True), request)


@router.post("/accounts/{account_id}/deposits")
async def submit_deposit(
    account_id: str, body: SubmitDepositRequest, core: Core, request: Request
) -> ApiResponse:
    data = await core.workflow.submit_deposit(
        account_id, body.amount, body.gateway_id, body.reference
    )
    return request_response(data, request)


@router.get("/accounts/{account_id}/deposits")
async def list_deposits(account_id: str, core: Core, request: Request) -> ApiResponse:
    return request_response(
        core.workflow.list_for_account(account_id, RequestKind.DEPOSIT), request
    )


@router.post("/accounts/{account_id}/withdrawals")
async def submit_withdrawal(
    account_id: str, body: SubmitWithdrawalRequest, core: Core, request: Request
) -> ApiResponse:
    data = await core.workflow.submit_withdrawal(
        account_id, body.amount, body.method_id, body.payout_account
    )
    return request_response(data, request)


@router.get("/accounts/{account_id}/withdrawals")
async def list_withdrawals(account_id: str, core: Core, request: Request) -> ApiResponse:
    return request_response(
        core.workflow.list_for_account(account_id, RequestKind.WITHDRAWAL), request
    )


@router.post("/accounts/{account_id}/kyc")
async def submit_kyc(
    account_id: str, body: SubmitKycRequest, core: Core, request: Request
) -> ApiResponse:
    data = await core.workflow.submit_kyc(
        account_id, body.full_name, body.document_name, body.mime_type, body.size_bytes
    )
    return request_response(data, request)


@router.get("/accounts/{account_id}/kyc")
async def list_kyc(account_id: str, core: Core, request: Request) -> ApiResponse:
    return request_response(core.workflow.list_for_account(account_id, RequestKind.KYC), request)
