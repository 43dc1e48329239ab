"""Ledger conservation audit.

For every account the entry log is the source of truth:

    sum(entry.amount)     == account.balance
    sum(entry.hold_delta) == account.blocked
    0 <= blocked <= balance
"""

import logging

from src.bk_common.money import ZERO
from src.bk_ledger.domain.models import Account
from src.bk_ledger.domain.repository import LedgerRepositoryProtocol

logger = logging.getLogger(__name__)


async def verify_account(repo: LedgerRepositoryProtocol, account: Account) -> list[str]:
    """Recompute one account from its entries. Returns violation strings."""
    entries = await repo.all_entries(account.id)
    violations: list[str] = []

    balance = sum((e.amount for e in entries), ZERO)
    blocked = sum((e.hold_delta for e in entries), ZERO)
    if balance != account.balance:
        violations.append(
            f"{account.id}: sum(entries.amount)={balance} != balance={account.balance}"
        )
    if blocked != account.blocked:
        violations.append(
            f"{account.id}: sum(entries.hold_delta)={blocked} != blocked={account.blocked}"
        )
    if account.balance < ZERO or account.blocked < ZERO:
        violations.append(
            f"{account.id}: negative balance={account.balance} blocked={account.blocked}"
        )
    if account.blocked > account.balance:
        violations.append(
            f"{account.id}: blocked={account.blocked} > balance={account.balance}"
        )
    if len(entries) != account.entry_seq:
        violations.append(
            f"{account.id}: {len(entries)} entries but entry_seq={account.entry_seq}"
        )

    for msg in violations:
        logger.error("Conservation violated: %s", msg)
    if not violations:
        logger.debug("Conservation OK: %s balance=%s blocked=%s", account.id, balance, blocked)
    return violations


async def verify_conservation(repo: LedgerRepositoryProtocol) -> list[str]:
    """Audit every account. Returns the combined list of violation strings."""
    violations: list[str] = []
    for account in await repo.list_accounts():
        violations.extend(await verify_account(repo, account))
    return violations
