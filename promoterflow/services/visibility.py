"""Role-scoped visibility rules.

A field promoter only ever sees their own records. This is the one hard
authorization boundary of the client: the admin scope override is ignored for
any role other than ADMIN.
"""

from typing import Iterable, Optional, Union

from promoterflow.models.activity import Activity
from promoterflow.models.notification import Notification
from promoterflow.models.promoter import Promoter, UserRole

ALL_PROMOTERS = "ALL"


def _is_admin(role: Union[UserRole, str]) -> bool:
    return role == UserRole.ADMIN or role == UserRole.ADMIN.value


def visible_activities(
    activities: Iterable[Activity],
    role: Union[UserRole, str],
    identity: str,
    admin_scope_override: Optional[str] = ALL_PROMOTERS,
) -> list[Activity]:
    """Activities the caller may see, in input order.

    ADMIN sees everything unless ``admin_scope_override`` names one promoter.
    Every other role sees only activities it owns.
    """
    if _is_admin(role):
        if admin_scope_override is None or admin_scope_override == ALL_PROMOTERS:
            return list(activities)
        return [a for a in activities if a.promoter_id == admin_scope_override]

    return [a for a in activities if a.promoter_id == identity]


def visible_notifications(
    notifications: Iterable[Notification],
    role: Union[UserRole, str],
    identity: str,
) -> list[Notification]:
    """Admins see all notifications; others see broadcasts and their own."""
    if _is_admin(role):
        return list(notifications)
    return [n for n in notifications if not n.recipient_id or n.recipient_id == identity]


def visible_promoters(
    promoters: Iterable[Promoter],
    role: Union[UserRole, str],
    identity: str,
) -> list[Promoter]:
    if _is_admin(role):
        return list(promoters)
    return [p for p in promoters if p.id == identity]
