"""Promoter model - field staff and admin identity records."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class UserRole(str, Enum):
    """Roles a promoter can hold."""
    ADMIN = "ADMIN"
    FIELD_PROMOTER = "FIELD_PROMOTER"


class Location(BaseModel):
    """Last known GPS fix."""
    lat: float = Field(..., description="Latitude")
    lng: float = Field(..., description="Longitude")
    address: Optional[str] = Field(None, description="Human readable address")


class Promoter(BaseModel):
    """Promoter model - the primary people record."""
    id: str = Field(..., description="Stable promoter ID (text)")
    name: str = Field(..., description="Full name")
    role: UserRole = Field(default=UserRole.FIELD_PROMOTER, description="ADMIN or FIELD_PROMOTER")
    email: Optional[str] = Field(None, description="Email address or login name")
    phone: Optional[str] = Field(None, description="Phone number")
    photo: Optional[str] = Field(None, description="Avatar URL")
    position: Optional[str] = Field(None, description="Job title")
    zone: Optional[str] = Field(None, description="Assigned territory")
    username: Optional[str] = None
    status: str = Field(default="active", description="Status: active, inactive, away")
    is_online: bool = Field(default=False, description="Set on login, cleared on logout")
    last_connection: Optional[str] = Field(None, description="ISO timestamp of last login/logout")
    last_updated: Optional[str] = None
    last_location: Optional[Location] = None
