"""
User Schemas - Pydantic models for user profile data validation and serialization.

Loyalty tier, points and VIP flag are read-only: they appear in responses but
no request schema accepts them.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import ConfigDict, Field, model_validator

from ..core.schemas import CamelModel
from .models import LoyaltyTier, SkinType

MedicalNotes = Optional[Union[List[Any], Dict[str, Any]]]


class UserResponse(CamelModel):
    """
    User Response Schema - Used when returning user data

    Fields:
    - id, email, first_name, last_name, phone
    - primary_clinic_id, skin_type, medical notes
    - beauty_points, loyalty_tier, vip_status: Derived loyalty state
    - sessions_completed, total_investment
    - notification preferences
    """
    id: int
    email: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    primary_clinic_id: Optional[int] = None
    skin_type: Optional[SkinType] = None
    allergies: MedicalNotes = None
    medications: MedicalNotes = None
    medical_conditions: MedicalNotes = None
    beauty_points: int
    loyalty_tier: LoyaltyTier
    vip_status: bool
    sessions_completed: int
    total_investment: float
    email_notifications: bool
    sms_notifications: bool
    marketing_notifications: bool
    is_verified: bool
    created_at: Optional[datetime] = None


class ProfileUpdate(CamelModel):
    """
    Profile Update Schema

    Unknown fields are rejected, so tier, points and VIP flag cannot be sent.
    """
    model_config = ConfigDict(extra="forbid")

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = None
    skin_type: Optional[SkinType] = None
    allergies: MedicalNotes = None
    medications: MedicalNotes = None
    medical_conditions: MedicalNotes = None
    primary_clinic_id: Optional[int] = None
    email_notifications: Optional[bool] = None
    sms_notifications: Optional[bool] = None
    marketing_notifications: Optional[bool] = None


class PasswordChange(CamelModel):
    """
    Password Change Schema

    Fields:
    - current_password: Current password for verification
    - new_password: New password, at least 8 characters
    """
    current_password: str
    new_password: str = Field(..., min_length=8)

    @model_validator(mode="after")
    def check_different(self):
        if self.current_password == self.new_password:
            raise ValueError("New password must be different from the current password")
        return self
