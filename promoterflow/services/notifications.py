"""Notification composition and retention."""

from datetime import datetime, timezone
from typing import Optional, Union

from promoterflow.models.notification import Notification, NotificationType
from promoterflow.models.promoter import UserRole
from promoterflow.services.local_store import NOTIFICATIONS, LocalStore
from promoterflow.services.visibility import visible_notifications
from promoterflow.utils.config import AppConfig
from promoterflow.utils.ids import generate_id
from promoterflow.utils.logging import get_structured_logger, mask_user_id

logger = get_structured_logger(__name__)


class NotificationService:
    """Stores notifications newest first, keeping at most ``max_notifications``."""

    def __init__(self, store: LocalStore, max_notifications: Optional[int] = None):
        self.store = store
        self.max_notifications = max_notifications or AppConfig.MAX_NOTIFICATIONS

    def send(
        self,
        title: str,
        message: str,
        notification_type: Union[NotificationType, str] = NotificationType.ADMIN_ANNOUNCEMENT,
        sender_id: Optional[str] = None,
        recipient_id: Optional[str] = None,
    ) -> Notification:
        notification = Notification(
            id=generate_id("n-"),
            title=title,
            message=message,
            type=NotificationType(notification_type),
            timestamp=datetime.now(timezone.utc).isoformat(),
            sender_id=sender_id,
            recipient_id=recipient_id,
        )

        trimmed = 0

        def prepend(items: list[Notification]) -> list[Notification]:
            nonlocal trimmed
            items = [notification, *items]
            trimmed = max(0, len(items) - self.max_notifications)
            return items[:self.max_notifications]

        self.store.set(NOTIFICATIONS, prepend)
        logger.info(
            "Notification sent",
            notification_type=notification.type.value,
            recipient=mask_user_id(recipient_id) or "ALL",
            trimmed=trimmed
        )
        return notification

    def visible_for(self, role: Union[UserRole, str], identity: str) -> list[Notification]:
        return visible_notifications(self.store.get(NOTIFICATIONS), role, identity)
