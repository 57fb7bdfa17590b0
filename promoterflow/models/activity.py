"""Activity model - scheduled or completed field engagements."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

from promoterflow.models.promoter import Location


class ActivityStatus(str, Enum):
    """Known activity statuses."""
    PENDING = "Pendiente"
    IN_PROGRESS = "En Proceso"
    COMPLETED = "Completado"
    CANCELLED = "Cancelado"


# Status assigned to imported schedule rows that carry none
SCHEDULED_STATUS = "Programado"

# Advisory only: the sync engine never rejects a transition
ADVISORY_TRANSITIONS: dict[str, set[str]] = {
    ActivityStatus.PENDING.value: {ActivityStatus.IN_PROGRESS.value, ActivityStatus.CANCELLED.value},
    ActivityStatus.IN_PROGRESS.value: {ActivityStatus.COMPLETED.value, ActivityStatus.CANCELLED.value},
    ActivityStatus.COMPLETED.value: set(),
    ActivityStatus.CANCELLED.value: set(),
}

FREE_TEXT_FIELDS = (
    "proposals",
    "problems_identified",
    "agreements",
    "additional_observations",
    "referral",
    "companions",
    "notes",
)


class ActivityType(str, Enum):
    """Kinds of field engagement."""
    COMMUNITY_VISIT = "Visita Comunitaria"
    COMPLAINT_FOLLOWUP = "Seguimiento a Denuncias"
    COMMUNITY_MEETING = "Reunion Comunitaria"
    LEGALIZATION_PROCESS = "Proceso de Legalizacion"
    OATH_TAKING = "Juramentacion"
    CONSTITUTION = "Constitucion"
    WORK_FOLLOWUP = "Seguimiento de obra"
    SOCIAL_ACTIVITY = "Actividad social"
    TRAINING_ACTIVITY = "Actividad formativa"
    OTHER = "Otra"


class Observation(BaseModel):
    """Append-only note attached to an activity."""
    id: str = Field(..., description="Observation ID")
    created_by: str = Field(..., description="Promoter ID of the author")
    note: str = Field(..., description="Note text")
    created_at: Optional[str] = None


class Activity(BaseModel):
    """Activity model - one logged or scheduled field engagement."""
    id: str = Field(..., description="Remote id, or a temporary local id until the next refresh")
    promoter_id: str = Field(..., description="Owner promoter ID")
    assigned_to: Optional[str] = Field(None, description="Assignee promoter ID")
    assigned_by: Optional[str] = Field(None, description="Admin that assigned the activity")
    community: str = ""
    objective: str = ""
    date: str = Field(default="", description="ISO date (YYYY-MM-DD)")
    time: str = Field(default="", description="HH:MM")
    status: str = Field(
        default=ActivityStatus.PENDING.value,
        description="Status: Pendiente, En Proceso, Completado, Cancelado (imports may carry others)"
    )
    activity_type: Optional[str] = None
    place: str = ""
    notes: str = ""
    attendee_name: str = ""
    attendee_role: str = ""
    attendee_phone: str = ""
    proposals: str = ""
    problems_identified: str = ""
    agreements: str = ""
    additional_observations: str = ""
    referral: str = ""
    companions: str = ""
    admin_comments: Optional[str] = None
    cancellation_reason: Optional[str] = None
    will_reschedule: Optional[bool] = None
    drive_links: str = ""
    verification_photo: Optional[str] = None
    location: Optional[Location] = None
    observations: list[Observation] = Field(default_factory=list)
    created_at: Optional[str] = None
