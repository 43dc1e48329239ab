"""In-memory position store."""

from collections import defaultdict

from src.bk_position.domain.models import Execution, Position, RealizedPnl


class InMemoryPositionRepository:
    def __init__(self) -> None:
        self._positions: dict[tuple[str, str], Position] = {}
        self._executions: dict[tuple[str, str], Execution] = {}
        self._realized: dict[str, list[RealizedPnl]] = defaultdict(list)

    def get(self, account_id: str, symbol: str) -> Position | None:
        return self._positions.get((account_id, symbol))

    def save(self, position: Position) -> None:
        self._positions[(position.account_id, position.symbol)] = position

    def list_for(self, account_id: str) -> list[Position]:
        return sorted(
            (p for (acct, _), p in self._positions.items() if acct == account_id),
            key=lambda p: p.symbol,
        )

    def get_execution(self, account_id: str, order_id: str) -> Execution | None:
        return self._executions.get((account_id, order_id))

    def save_execution(self, execution: Execution) -> None:
        self._executions[(execution.account_id, execution.order_id)] = execution

    def list_executions(self, account_id: str) -> list[Execution]:
        items = [e for e in self._executions.values() if e.account_id == account_id]
        return sorted(items, key=lambda e: e.executed_at, reverse=True)

    def add_realized(self, record: RealizedPnl) -> None:
        self._realized[record.account_id].append(record)

    def list_realized(self, account_id: str) -> list[RealizedPnl]:
        return list(reversed(self._realized.get(account_id, [])))
