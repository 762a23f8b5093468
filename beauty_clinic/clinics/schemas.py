"""
Clinic Schemas - Pydantic models for clinic data validation and serialization.
"""
import re
from datetime import datetime
from typing import Dict, Optional

from pydantic import EmailStr, Field, field_validator, model_validator

from ..core.schemas import CamelModel
from .models import WEEKDAYS

_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
_SLUG = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


class BusinessDay(CamelModel):
    """
    Opening hours of one weekday

    Fields:
    - open / close: "HH:MM", required unless the day is closed
    - closed: Whether the clinic is closed that day
    """
    open: Optional[str] = None
    close: Optional[str] = None
    closed: bool = False

    @model_validator(mode="after")
    def check_hours(self):
        if self.closed:
            return self
        if not self.open or not self.close:
            raise ValueError("open and close are required unless the day is closed")
        if not _HHMM.match(self.open) or not _HHMM.match(self.close):
            raise ValueError("hours must use HH:MM")
        if self.open >= self.close:
            raise ValueError("open must be before close")
        return self


BusinessHours = Dict[str, BusinessDay]


def _check_weekdays(value: Optional[BusinessHours]) -> Optional[BusinessHours]:
    if value is None:
        return value
    unknown = set(value) - set(WEEKDAYS)
    if unknown:
        raise ValueError(f"Unknown weekdays: {', '.join(sorted(unknown))}")
    return value


class ClinicCreate(CamelModel):
    """
    Clinic Registration Schema

    Fields:
    - name / slug: Display name and URL slug (lowercase, dashes)
    - email / password: Clinic admin credentials
    - phone, address, city, country, timezone
    - business_hours: Optional weekly schedule
    """
    name: str = Field(..., min_length=2, max_length=200)
    slug: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=8)
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: str = "ES"
    timezone: str = "Europe/Madrid"
    business_hours: Optional[BusinessHours] = None
    enable_vip_program: bool = True
    enable_online_booking: bool = True

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v):
        if not _SLUG.match(v):
            raise ValueError("slug must be lowercase letters, digits and dashes")
        return v

    @field_validator("business_hours")
    @classmethod
    def validate_business_hours(cls, v):
        return _check_weekdays(v)


class ClinicUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    timezone: Optional[str] = None
    business_hours: Optional[BusinessHours] = None
    enable_vip_program: Optional[bool] = None
    enable_online_booking: Optional[bool] = None

    @field_validator("business_hours")
    @classmethod
    def validate_business_hours(cls, v):
        return _check_weekdays(v)


class ClinicResponse(CamelModel):
    """
    Clinic Response Schema - Public clinic data, never the password hash
    """
    id: int
    name: str
    slug: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: str
    timezone: str
    business_hours: Optional[Dict[str, BusinessDay]] = None
    is_active: bool
    is_verified: bool
    enable_vip_program: bool
    enable_online_booking: bool
    created_at: Optional[datetime] = None
