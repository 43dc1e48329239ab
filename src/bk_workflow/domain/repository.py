"""Repository Protocols for workflow records and payment configuration.

Writes are only made from LedgerTransaction on-commit hooks, so they happen
under the owning account's lock and only after the ledger commit.
"""

from typing import Protocol

from src.bk_common.enums import RequestKind, RequestStatus
from src.bk_workflow.domain.models import PaymentGateway, WithdrawalMethod, WorkflowRequest


class RequestRepositoryProtocol(Protocol):
    def get(self, request_id: str) -> WorkflowRequest | None: ...

    def save(self, request: WorkflowRequest) -> None: ...

    def list_requests(
        self,
        kind: RequestKind | None = None,
        status: RequestStatus | None = None,
        account_id: str | None = None,
    ) -> list[WorkflowRequest]: ...


class PaymentConfigRepositoryProtocol(Protocol):
    def get_gateway(self, gateway_id: str) -> PaymentGateway | None: ...

    def save_gateway(self, gateway: PaymentGateway) -> None: ...

    def list_gateways(self, active_only: bool = False) -> list[PaymentGateway]: ...

    def get_method(self, method_id: str) -> WithdrawalMethod | None: ...

    def save_method(self, method: WithdrawalMethod) -> None: ...

    def list_methods(self, active_only: bool = False) -> list[WithdrawalMethod]: ...
