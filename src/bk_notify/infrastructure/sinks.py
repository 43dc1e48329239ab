"""Notification sinks: an in-memory inbox for the UI and a logging sink."""

import logging
from collections import defaultdict

from src.bk_notify.domain.models import Notification

logger = logging.getLogger(__name__)


class InMemoryInbox:
    """Per-account notification inbox, newest first."""

    def __init__(self) -> None:
        self._items: dict[str, list[Notification]] = defaultdict(list)

    async def deliver(self, notification: Notification) -> None:
        self._items[notification.account_id].insert(0, notification)

    def list_for(self, account_id: str, unread_only: bool = False) -> list[Notification]:
        items = self._items.get(account_id, [])
        if unread_only:
            return [n for n in items if not n.read]
        return list(items)

    def unread_count(self, account_id: str) -> int:
        return sum(1 for n in self._items.get(account_id, []) if not n.read)

    def mark_read(self, account_id: str, notification_id: str) -> bool:
        for n in self._items.get(account_id, []):
            if n.id == notification_id:
                n.read = True
                return True
        return False

    def mark_all_read(self, account_id: str) -> int:
        count = 0
        for n in self._items.get(account_id, []):
            if not n.read:
                n.read = True
                count += 1
        return count


class LoggingSink:
    async def deliver(self, notification: Notification) -> None:
        logger.info(
            "notify %s [%s] %s",
            notification.account_id,
            notification.category.value,
            notification.title,
        )
