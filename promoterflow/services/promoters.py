"""Promoter management - the admin user list, kept locally and mirrored to ``/promoters``."""

from datetime import datetime, timezone
from typing import Any, Optional, Union

from pydantic import ValidationError

from promoterflow.models.promoter import Promoter, UserRole
from promoterflow.services.activity_mapper import remote_role
from promoterflow.services.local_store import PROMOTERS, LocalStore
from promoterflow.services.remote_store import RemoteActivityStore
from promoterflow.services.visibility import visible_promoters
from promoterflow.utils.errors import PromoterConflict, RemoteFailure, StorageError
from promoterflow.utils.logging import get_structured_logger, mask_user_id

logger = get_structured_logger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def promoter_from_row(row: dict[str, Any], existing: Optional[Promoter] = None) -> Promoter:
    """Build a Promoter from a ``/promoters`` row, keeping local-only fields of ``existing``."""
    base = existing.model_dump() if existing is not None else {}
    role = str(row.get("role") or "").strip().lower()
    merged = {
        **base,
        "id": str(row["id"]),
        "name": row.get("name") or base.get("name") or str(row["id"]),
        "role": UserRole.ADMIN if role == "admin" else (
            UserRole.FIELD_PROMOTER if role else base.get("role", UserRole.FIELD_PROMOTER)
        ),
    }
    for field in ("email", "photo", "phone", "last_connection"):
        if row.get(field) is not None:
            merged[field] = row[field]
    if isinstance(row.get("is_online"), bool):
        merged["is_online"] = row["is_online"]
    if row.get("updated_at"):
        merged["last_updated"] = row["updated_at"]
    return Promoter.model_validate(merged)


def profile_payload(promoter: Promoter) -> dict[str, Any]:
    """Body for ``PUT /promoters``."""
    return {
        "id": promoter.id,
        "name": promoter.name,
        "email": promoter.email,
        "role": remote_role(promoter.role),
        "photo": promoter.photo,
        "phone": promoter.phone,
        "isOnline": promoter.is_online,
        "lastConnection": promoter.last_connection,
    }


class PromoterService:
    """Add, edit and remove promoters in the local store.

    Local edits never call the remote store; ``push_profile`` and
    ``refresh`` are the explicit sync points.
    """

    def __init__(self, store: LocalStore, remote: Optional[RemoteActivityStore] = None):
        self.store = store
        self.remote = remote

    def get(self, promoter_id: str) -> Optional[Promoter]:
        return next((p for p in self.store.get(PROMOTERS) if p.id == promoter_id), None)

    def add(self, promoter: Union[Promoter, dict[str, Any]]) -> Promoter:
        """Prepend a new promoter.

        Raises:
            PromoterConflict: the id is already taken; nothing is stored.
        """
        promoter = Promoter.model_validate(promoter)
        if self.get(promoter.id) is not None:
            raise PromoterConflict(f"Promoter already exists: {promoter.id}")

        promoter = promoter.model_copy(update={"last_updated": _now()})
        self.store.set(PROMOTERS, lambda items: [promoter, *items])
        logger.info("Promoter added", promoter=mask_user_id(promoter.id), role=promoter.role.value)
        return promoter

    def update_profile(self, promoter_id: str, fields: dict[str, Any]) -> Optional[Promoter]:
        """Merge ``fields`` into one promoter; returns None for an unknown id."""
        target = self.get(promoter_id)
        if target is None:
            logger.warning("Profile update for unknown promoter", promoter=mask_user_id(promoter_id))
            return None

        changes = {key: value for key, value in fields.items() if key != "id"}
        updated = Promoter.model_validate({**target.model_dump(), **changes, "last_updated": _now()})
        self.store.set(
            PROMOTERS,
            lambda items: [updated if p.id == promoter_id else p for p in items]
        )
        logger.info("Promoter profile updated", promoter=mask_user_id(promoter_id), fields=sorted(changes))
        return updated

    def delete(self, promoter_id: str) -> bool:
        if self.get(promoter_id) is None:
            return False

        self.store.set(PROMOTERS, lambda items: [p for p in items if p.id != promoter_id])
        logger.info("Promoter deleted", promoter=mask_user_id(promoter_id))
        return True

    def visible_for(self, role: Union[UserRole, str], identity: str) -> list[Promoter]:
        return visible_promoters(self.store.get(PROMOTERS), role, identity)

    async def push_profile(self, promoter_id: str) -> bool:
        """Upsert one local profile remotely. Returns False on any failure."""
        promoter = self.get(promoter_id)
        if promoter is None or self.remote is None:
            return False

        try:
            await self.remote.upsert_promoter(profile_payload(promoter))
        except RemoteFailure as e:
            logger.error(
                "Profile push failed",
                promoter=mask_user_id(promoter_id),
                status_code=e.status_code,
                error=str(e)
            )
            return False
        return True

    async def refresh(self) -> bool:
        """Merge the remote promoter list into the local collection.

        Remote rows come first in remote order, carrying over local-only
        fields of matching promoters; promoters the remote does not know
        stay at the end. Local state is untouched on failure.
        """
        if self.remote is None:
            return False

        local = {p.id: p for p in self.store.get(PROMOTERS)}
        try:
            rows = await self.remote.list_promoters()
            merged = [promoter_from_row(row, local.get(str(row.get("id")))) for row in rows]
        except (RemoteFailure, ValidationError, KeyError) as e:
            logger.error(
                "Promoter refresh failed, keeping local promoters",
                status_code=getattr(e, "status_code", None),
                error=str(e)
            )
            return False

        seen = {p.id for p in merged}
        merged.extend(p for p in local.values() if p.id not in seen)
        try:
            self.store.set(PROMOTERS, lambda _: merged)
        except StorageError as e:
            logger.error("Promoter refresh fetched but local write failed", error=str(e))
            return False
        logger.info("Promoter refresh applied", promoters=len(merged), remote_rows=len(rows))
        return True
