"""Notification record handed to external collaborators (UI inbox, email/SMS)."""

from dataclasses import dataclass, field
from datetime import datetime

from src.bk_common.datetime_utils import utc_now
from src.bk_common.enums import NotificationCategory

# Admin-facing notifications are addressed to this pseudo account.
ADMIN_RECIPIENT = "ADMIN"


@dataclass
class Notification:
    id: str
    account_id: str
    category: NotificationCategory
    title: str
    message: str
    link: str | None = None
    read: bool = False
    created_at: datetime = field(default_factory=utc_now)
