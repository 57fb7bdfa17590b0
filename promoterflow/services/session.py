"""Session lifecycle - login, logout, and resume of the persisted identity."""

from datetime import datetime, timezone
from typing import Optional, Union

from promoterflow.models.notification import NotificationType
from promoterflow.models.promoter import Promoter, UserRole
from promoterflow.models.session import SessionState
from promoterflow.services.local_store import PROMOTERS, SESSION, LocalStore
from promoterflow.services.notifications import NotificationService
from promoterflow.utils.errors import AuthorizationViolation
from promoterflow.utils.logging import get_structured_logger, mask_user_id

logger = get_structured_logger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SessionService:
    def __init__(self, store: LocalStore, notifications: Optional[NotificationService] = None):
        self.store = store
        self.notifications = notifications

    def current(self) -> Optional[SessionState]:
        """The persisted session, if any; survives a reload."""
        return self.store.get(SESSION)

    def _set_online(self, user_id: str, online: bool) -> None:
        timestamp = _now()

        def update(promoters: list[Promoter]) -> list[Promoter]:
            return [
                p.model_copy(update={"is_online": online, "last_connection": timestamp})
                if p.id == user_id else p
                for p in promoters
            ]

        self.store.set(PROMOTERS, update)

    def login(self, role: Union[UserRole, str], user_id: str) -> SessionState:
        role = UserRole(role)
        promoter = next((p for p in self.store.get(PROMOTERS) if p.id == user_id), None)
        if promoter is None:
            raise AuthorizationViolation(f"Unknown promoter: {user_id}")
        if promoter.role != role:
            raise AuthorizationViolation(f"Promoter {user_id} does not hold role {role.value}")

        session = SessionState(current_user_id=user_id, role=role)
        self.store.set(SESSION, lambda _: session)
        self._set_online(user_id, True)

        if role == UserRole.FIELD_PROMOTER and self.notifications is not None:
            self.notifications.send(
                "Sesión Iniciada",
                f"{promoter.name} ha ingresado al sistema. GPS Activo.",
                NotificationType.USER_LOGIN,
                sender_id=user_id,
                recipient_id=user_id,
            )

        logger.info("Login", user=mask_user_id(user_id), role=role.value)
        return session

    def logout(self) -> None:
        session = self.current()
        if session is None:
            return

        self._set_online(session.current_user_id, False)
        self.store.clear(SESSION)
        logger.info("Logout", user=mask_user_id(session.current_user_id))
