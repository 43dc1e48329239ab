"""Repository Protocol for positions, executions and realized P&L records."""

from typing import Protocol

from src.bk_position.domain.models import Execution, Position, RealizedPnl


class PositionRepositoryProtocol(Protocol):
    def get(self, account_id: str, symbol: str) -> Position | None: ...

    def save(self, position: Position) -> None: ...

    def list_for(self, account_id: str) -> list[Position]: ...

    def get_execution(self, account_id: str, order_id: str) -> Execution | None: ...

    def save_execution(self, execution: Execution) -> None: ...

    def list_executions(self, account_id: str) -> list[Execution]: ...

    def add_realized(self, record: RealizedPnl) -> None: ...

    def list_realized(self, account_id: str) -> list[RealizedPnl]: ...
