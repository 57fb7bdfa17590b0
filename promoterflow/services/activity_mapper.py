"""Translate activities between the local shape, remote rows, and schedule CSV rows."""

from typing import Any, Optional, Union

from promoterflow.models.activity import Activity, ActivityStatus, Observation
from promoterflow.models.promoter import UserRole
from promoterflow.models.remote import ActivityCreatePayload, ActivityRow, RemoteRole

_COMMUNITY_PREFIX = "Comunidad:"

_STATUS_ALIASES = {status.value.lower(): status.value for status in ActivityStatus}
_STATUS_ALIASES.update({
    "pending": ActivityStatus.PENDING.value,
    "in_progress": ActivityStatus.IN_PROGRESS.value,
    "en_proceso": ActivityStatus.IN_PROGRESS.value,
    "done": ActivityStatus.COMPLETED.value,
    "completed": ActivityStatus.COMPLETED.value,
    "cancelled": ActivityStatus.CANCELLED.value,
})


def remote_role(role: Union[UserRole, str]) -> RemoteRole:
    """Map a local role onto the remote store's ``admin``/``gestor`` vocabulary."""
    return "admin" if role in (UserRole.ADMIN, UserRole.ADMIN.value) else "gestor"


def normalize_status(raw: Optional[str]) -> str:
    """Canonical status for known spellings; unknown values are kept as-is."""
    if not raw or not raw.strip():
        return ActivityStatus.PENDING.value
    return _STATUS_ALIASES.get(raw.strip().lower(), raw.strip())


def resolve_owner(row: ActivityRow) -> str:
    """Owner of a remote row: the assignee of admin-authored rows, else the author."""
    if row.role == "admin" and row.assigned_to:
        return row.assigned_to
    return row.created_by


def _community_from_description(description: Optional[str]) -> str:
    if not description:
        return ""
    first_line = description.splitlines()[0]
    if first_line.startswith(_COMMUNITY_PREFIX):
        return first_line[len(_COMMUNITY_PREFIX):].strip()
    return ""


def activity_from_row(row: Union[ActivityRow, dict[str, Any]]) -> Activity:
    """Build a local Activity from a remote row; raises ValidationError on malformed rows."""
    if not isinstance(row, ActivityRow):
        row = ActivityRow.model_validate(row)

    observations = [
        Observation(
            id=str(item.get("id", "")),
            created_by=str(item.get("created_by", "")),
            note=str(item.get("note", "")),
            created_at=item.get("created_at"),
        )
        for item in row.observations
        if item
    ]

    return Activity(
        id=str(row.id),
        promoter_id=resolve_owner(row),
        assigned_to=row.assigned_to,
        assigned_by=row.created_by if row.role == "admin" else None,
        objective=row.objective or row.title or "",
        community=row.community or _community_from_description(row.description),
        date=row.activity_date or row.date or "",
        time=row.activity_time or row.time or "",
        status=normalize_status(row.status),
        observations=observations,
        created_at=row.created_at,
    )


def creation_payload(
    activity: Activity,
    author_id: str,
    author_role: Union[UserRole, str],
    admin_fallback_assignee: str,
    field_fallback_assignee: str,
) -> ActivityCreatePayload:
    """Build the ``POST /activities`` body for a locally authored activity.

    Assignee resolution: an explicit ``assigned_to`` wins. An admin creating an
    activity for another promoter assigns it to that promoter. Otherwise admins
    fall back to ``admin_fallback_assignee`` and field promoters to
    ``field_fallback_assignee``.
    """
    role = remote_role(author_role)
    assigned_to = activity.assigned_to
    if not assigned_to:
        if role == "admin":
            if activity.promoter_id and activity.promoter_id != author_id:
                assigned_to = activity.promoter_id
            else:
                assigned_to = admin_fallback_assignee
        else:
            assigned_to = field_fallback_assignee

    return ActivityCreatePayload(
        created_by=author_id,
        role=role,
        assigned_to=assigned_to,
        objective=activity.objective,
        community=activity.community,
        date=activity.date,
        time=activity.time,
        status=activity.status,
    )


def activity_from_schedule_row(row: dict[str, str], assigned_by: Optional[str] = None) -> Activity:
    return Activity(
        id=row["id"],
        promoter_id=row["promoterId"],
        assigned_to=row["promoterId"] if assigned_by else None,
        assigned_by=assigned_by,
        date=row.get("date", ""),
        time=row.get("time", ""),
        community=row.get("community", ""),
        objective=row.get("objective", ""),
        status=row.get("status", ""),
        place=row.get("place", ""),
        notes=row.get("notes", ""),
    )


def schedule_row_from_activity(activity: Activity) -> dict[str, str]:
    return {
        "id": activity.id,
        "promoterId": activity.promoter_id,
        "date": activity.date,
        "time": activity.time,
        "community": activity.community,
        "objective": activity.objective,
        "status": activity.status,
        "place": activity.place,
        "notes": activity.notes,
    }
