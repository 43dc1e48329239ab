"""Fire-and-forget notification emitter.

Services call ``emit`` only after the ledger commit has succeeded. A sink
failure is logged and dropped: notifying is never allowed to undo or fail
a committed balance change.
"""

import logging
from typing import Protocol

from src.bk_common.enums import NotificationCategory
from src.bk_common.id_generator import generate_id
from src.bk_notify.domain.models import ADMIN_RECIPIENT, Notification

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    async def deliver(self, notification: Notification) -> None: ...


class NotificationEmitter:
    def __init__(self, sinks: list[NotificationSink] | None = None) -> None:
        self._sinks: list[NotificationSink] = list(sinks or [])

    def add_sink(self, sink: NotificationSink) -> None:
        self._sinks.append(sink)

    async def emit(
        self,
        account_id: str,
        category: NotificationCategory,
        title: str,
        message: str,
        link: str | None = None,
    ) -> Notification:
        notification = Notification(
            id=generate_id("NTF"),
            account_id=account_id,
            category=category,
            title=title,
            message=message,
            link=link,
        )
        for sink in self._sinks:
            try:
                await sink.deliver(notification)
            except Exception:
                logger.warning(
                    "Notification %s to %s dropped by %s",
                    notification.id,
                    account_id,
                    type(sink).__name__,
                    exc_info=True,
                )
        return notification

    async def emit_admin(
        self,
        category: NotificationCategory,
        title: str,
        message: str,
        link: str | None = None,
    ) -> Notification:
        return await self.emit(ADMIN_RECIPIENT, category, title, message, link)
