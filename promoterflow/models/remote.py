"""Wire models for the remote activity store."""

from typing import Any, Literal, Optional, Union
from pydantic import BaseModel, Field


RemoteRole = Literal["admin", "gestor"]


class ActivityRow(BaseModel):
    """Activity row as returned by ``GET /activities`` and ``POST /activities``.

    The backing table has gone through a rename (title -> objective, date ->
    activity_date), so both spellings are accepted.
    """
    id: Union[str, int]
    created_by: str
    role: Optional[str] = None
    assigned_to: Optional[str] = None
    objective: Optional[str] = None
    title: Optional[str] = None
    community: Optional[str] = None
    description: Optional[str] = None
    activity_date: Optional[str] = None
    date: Optional[str] = None
    activity_time: Optional[str] = None
    time: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[str] = None
    observations: list[dict[str, Any]] = Field(default_factory=list)


class ActivityCreatePayload(BaseModel):
    """Body of ``POST /activities``."""
    created_by: str
    role: RemoteRole
    assigned_to: Optional[str] = None
    objective: str
    community: str = ""
    date: str = ""
    time: str = ""
    status: str


class BulkCreateResult(BaseModel):
    """Outcome of a sequential bulk create."""
    created: list[str] = Field(default_factory=list, description="Local ids that were accepted")
    failed: list[str] = Field(default_factory=list, description="Local ids that were skipped")
    refreshed: bool = False
