"""Notification model - admin-to-field messages and system events."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class NotificationType(str, Enum):
    """Notification categories."""
    ASSIGNMENT = "ASSIGNMENT"
    STATUS_CHANGE = "STATUS_CHANGE"
    NEW_ACTION = "NEW_ACTION"
    PROGRAM_UPLOAD = "PROGRAM_UPLOAD"
    USER_LOGIN = "USER_LOGIN"
    ADMIN_ANNOUNCEMENT = "ADMIN_ANNOUNCEMENT"
    ADMIN_WARNING = "ADMIN_WARNING"


class Notification(BaseModel):
    """Immutable once created."""
    id: str
    title: str
    message: str
    type: NotificationType = NotificationType.ADMIN_ANNOUNCEMENT
    timestamp: str
    read: bool = False
    sender_id: Optional[str] = None
    recipient_id: Optional[str] = Field(None, description="Absent means broadcast")
