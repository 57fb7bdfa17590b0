"""Session model - persisted (identity, role) pair."""

from pydantic import BaseModel

from promoterflow.models.promoter import UserRole


class SessionState(BaseModel):
    current_user_id: str
    role: UserRole
