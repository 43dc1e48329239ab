"""In-memory workflow repositories."""

from src.bk_common.enums import RequestKind, RequestStatus
from src.bk_workflow.domain.models import PaymentGateway, WithdrawalMethod, WorkflowRequest


class InMemoryRequestRepository:
    def __init__(self) -> None:
        self._requests: dict[str, WorkflowRequest] = {}

    def get(self, request_id: str) -> WorkflowRequest | None:
        return self._requests.get(request_id)

    def save(self, request: WorkflowRequest) -> None:
        self._requests[request.id] = request

    def list_requests(
        self,
        kind: RequestKind | None = None,
        status: RequestStatus | None = None,
        account_id: str | None = None,
    ) -> list[WorkflowRequest]:
        items = [
            r
            for r in self._requests.values()
            if (kind is None or r.kind == kind)
            and (status is None or r.status == status)
            and (account_id is None or r.account_id == account_id)
        ]
        return sorted(items, key=lambda r: r.created_at, reverse=True)


class InMemoryPaymentConfigRepository:
    def __init__(self) -> None:
        self._gateways: dict[str, PaymentGateway] = {}
        self._methods: dict[str, WithdrawalMethod] = {}

    def get_gateway(self, gateway_id: str) -> PaymentGateway | None:
        return self._gateways.get(gateway_id)

    def save_gateway(self, gateway: PaymentGateway) -> None:
        self._gateways[gateway.id] = gateway

    def list_gateways(self, active_only: bool = False) -> list[PaymentGateway]:
        return [g for g in self._gateways.values() if g.is_active or not active_only]

    def get_method(self, method_id: str) -> WithdrawalMethod | None:
        return self._methods.get(method_id)

    def save_method(self, method: WithdrawalMethod) -> None:
        self._methods[method.id] = method

    def list_methods(self, active_only: bool = False) -> list[WithdrawalMethod]:
        return [m for m in self._methods.values() if m.is_active or not active_only]
