"""Sync engine - bridges optimistic local edits and the authoritative remote store.

Creates are remote-authoritative: the remote store assigns the canonical id
and a full refresh replaces the local collection afterwards. Updates are
local-only because the remote store exposes no update endpoint, so they are
visible to this client until the next refresh overwrites them.
"""

from enum import Enum
from typing import Any, Iterable, Optional, Union

from pydantic import ValidationError

from promoterflow.models.activity import (
    ADVISORY_TRANSITIONS,
    FREE_TEXT_FIELDS,
    Activity,
    ActivityStatus,
)
from promoterflow.models.notification import NotificationType
from promoterflow.models.promoter import UserRole
from promoterflow.models.remote import ActivityRow, BulkCreateResult
from promoterflow.models.session import SessionState
from promoterflow.services.activity_mapper import (
    activity_from_row,
    activity_from_schedule_row,
    creation_payload,
    remote_role,
    schedule_row_from_activity,
)
from promoterflow.services.csv_codec import decode_schedule, encode_schedule
from promoterflow.services.local_store import ACTIVITIES, SESSION, LocalStore
from promoterflow.services.notifications import NotificationService
from promoterflow.services.remote_store import RemoteActivityStore
from promoterflow.services.visibility import ALL_PROMOTERS, visible_activities
from promoterflow.utils.config import AppConfig
from promoterflow.utils.errors import AuthorizationViolation, RemoteFailure, StorageError
from promoterflow.utils.ids import generate_id
from promoterflow.utils.logging import (
    correlation_context,
    get_correlation_id,
    get_structured_logger,
    mask_user_id,
)

logger = get_structured_logger(__name__)


class SyncEngine:
    """Refresh, create, bulk create, and local update of activities for one identity."""

    def __init__(
        self,
        store: LocalStore,
        remote: RemoteActivityStore,
        user_id: str,
        role: Union[UserRole, str],
        notifications: Optional[NotificationService] = None,
        admin_fallback_assignee: Optional[str] = None,
        field_fallback_assignee: Optional[str] = None,
    ):
        self.store = store
        self.remote = remote
        self.user_id = user_id
        self.role = UserRole(role)
        self.notifications = notifications
        self.admin_fallback_assignee = admin_fallback_assignee or AppConfig.ADMIN_FALLBACK_ASSIGNEE
        self.field_fallback_assignee = field_fallback_assignee or AppConfig.FIELD_FALLBACK_ASSIGNEE

    @classmethod
    def from_session(cls, store: LocalStore, remote: RemoteActivityStore, **kwargs: Any) -> "SyncEngine":
        """Build an engine for the identity persisted in the store's session."""
        session: Optional[SessionState] = store.get(SESSION)
        if session is None:
            raise AuthorizationViolation("No active session")
        return cls(store, remote, session.current_user_id, session.role, **kwargs)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    async def refresh(self) -> bool:
        """Replace the local activity collection with the remote listing.

        Returns False and leaves local state untouched on any failure.
        """
        with correlation_context(get_correlation_id(), prefix="refresh"):
            try:
                rows = await self.remote.list_activities(remote_role(self.role), self.user_id)
                activities = [activity_from_row(row) for row in rows]
            except (RemoteFailure, ValidationError) as e:
                logger.error(
                    "Refresh failed, keeping local activities",
                    user=mask_user_id(self.user_id),
                    role=self.role.value,
                    status_code=getattr(e, "status_code", None),
                    error=str(e)
                )
                return False

            try:
                self.store.set(ACTIVITIES, lambda _: activities)
            except StorageError as e:
                logger.error(
                    "Refresh fetched but local write failed",
                    user=mask_user_id(self.user_id),
                    activities=len(activities),
                    error=str(e)
                )
                return False

            logger.info(
                "Refresh applied",
                user=mask_user_id(self.user_id),
                role=self.role.value,
                activities=len(activities)
            )
            return True

    async def _post(self, activity: Activity) -> ActivityRow:
        payload = creation_payload(
            activity,
            author_id=self.user_id,
            author_role=self.role,
            admin_fallback_assignee=self.admin_fallback_assignee,
            field_fallback_assignee=self.field_fallback_assignee,
        )
        return await self.remote.create_activity(payload)

    async def create(self, activity: Activity) -> bool:
        """Optimistically insert ``activity``, create it remotely, then refresh.

        On failure the optimistic copy is discarded. No retry.
        """
        with correlation_context(get_correlation_id(), prefix="create"):
            local = activity if activity.id else activity.model_copy(update={"id": generate_id("tmp-")})
            try:
                self.store.set(ACTIVITIES, lambda items: [local, *items])
            except StorageError as e:
                logger.error("Activity create aborted, local write failed", local_id=local.id, error=str(e))
                return False

            try:
                row = await self._post(local)
            except RemoteFailure as e:
                try:
                    self.store.set(ACTIVITIES, lambda items: [a for a in items if a.id != local.id])
                except StorageError as storage_error:
                    logger.warning(
                        "Could not persist removal of discarded activity",
                        local_id=local.id,
                        error=str(storage_error)
                    )
                logger.error(
                    "Activity create failed, discarded local copy",
                    local_id=local.id,
                    status_code=e.status_code,
                    error=str(e)
                )
                return False

            logger.info("Activity created", local_id=local.id, remote_id=str(row.id))
            if self.notifications is not None:
                self.notifications.send(
                    "Nueva Actividad",
                    f"Nueva labor registrada: {local.objective}",
                    NotificationType.NEW_ACTION,
                    sender_id=self.user_id,
                )
            await self.refresh()
            return True

    async def bulk_create(self, activities: Iterable[Activity]) -> BulkCreateResult:
        """Create each activity in order, skipping failures, then refresh once."""
        with correlation_context(get_correlation_id(), prefix="bulk"):
            result = BulkCreateResult()
            for index, activity in enumerate(activities):
                try:
                    await self._post(activity)
                    result.created.append(activity.id)
                except RemoteFailure as e:
                    result.failed.append(activity.id)
                    logger.warning(
                        "Bulk create item failed, skipping",
                        item_index=index,
                        local_id=activity.id,
                        status_code=e.status_code,
                        error=str(e)
                    )

            logger.info(
                "Bulk create finished",
                created_count=len(result.created),
                failed_count=len(result.failed)
            )
            result.refreshed = await self.refresh()
            return result

    def update_local(self, activity_id: str, fields: dict[str, Any]) -> Optional[Activity]:
        """Merge ``fields`` into one activity and persist locally. Never calls the remote store."""
        changes = {
            key: value.value if isinstance(value, Enum) else value
            for key, value in fields.items()
            if key != "id"
        }

        target = next((a for a in self.store.get(ACTIVITIES) if a.id == activity_id), None)
        if target is None:
            logger.warning("Local update for unknown activity", activity_id=activity_id)
            return None

        if target.status == ActivityStatus.COMPLETED.value and any(f in changes for f in FREE_TEXT_FIELDS):
            logger.debug("Free text edited on a completed activity", activity_id=activity_id)

        new_status = changes.get("status")
        if new_status and new_status != target.status and \
                new_status not in ADVISORY_TRANSITIONS.get(target.status, set()):
            logger.debug(
                "Status change outside the advisory path",
                activity_id=activity_id,
                from_status=target.status,
                to_status=new_status
            )

        updated = Activity.model_validate({**target.model_dump(), **changes})
        self.store.set(
            ACTIVITIES,
            lambda items: [updated if a.id == activity_id else a for a in items]
        )
        return updated

    async def import_schedule_csv(self, text: str) -> BulkCreateResult:
        """Decode a schedule CSV and bulk create its rows.

        Raises:
            SchemaError: required columns missing; nothing is created.
            AuthorizationViolation: a field promoter imported rows owned by
                someone else; nothing is created.
        """
        rows = decode_schedule(text)
        for row in rows:
            row["promoterId"] = row["promoterId"].strip() or self.user_id

        if not self.is_admin:
            foreign = sorted({row["promoterId"] for row in rows if row["promoterId"] != self.user_id})
            if foreign:
                logger.warning(
                    "Schedule import rejected: rows owned by other promoters",
                    user=mask_user_id(self.user_id),
                    foreign_owners=len(foreign)
                )
                raise AuthorizationViolation(
                    f"Promoter {self.user_id} cannot import activities for: {', '.join(foreign)}"
                )

        assigned_by = self.user_id if self.is_admin else None
        activities = [activity_from_schedule_row(row, assigned_by=assigned_by) for row in rows]
        logger.info("Schedule import started", rows=len(activities))

        result = await self.bulk_create(activities)
        if self.notifications is not None and result.created:
            self.notifications.send(
                "Programación Cargada",
                f"Se importaron {len(result.created)} actividades",
                NotificationType.PROGRAM_UPLOAD,
                sender_id=self.user_id,
            )
        return result

    def export_schedule_csv(self, admin_scope_override: Optional[str] = ALL_PROMOTERS) -> str:
        """Encode the caller's visible activities in the schedule exchange format."""
        activities = visible_activities(
            self.store.get(ACTIVITIES),
            self.role,
            self.user_id,
            admin_scope_override,
        )
        return encode_schedule(schedule_row_from_activity(a) for a in activities)

    def visible(self, admin_scope_override: Optional[str] = ALL_PROMOTERS) -> list[Activity]:
        return visible_activities(self.store.get(ACTIVITIES), self.role, self.user_id, admin_scope_override)

    async def add_observation(self, activity_id: str, note: str) -> bool:
        """Append an observation note remotely, then refresh."""
        with correlation_context(get_correlation_id(), prefix="observation"):
            try:
                await self.remote.add_observation(activity_id, self.user_id, note)
            except RemoteFailure as e:
                logger.error(
                    "Observation create failed",
                    activity_id=activity_id,
                    status_code=e.status_code,
                    error=str(e)
                )
                return False
            return await self.refresh()
