"""
Professional Schemas - Pydantic models for professional data validation and serialization.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field

from ..core.schemas import CamelModel
from .models import EmploymentType, ProfessionalRole


class ProfessionalCreate(CamelModel):
    """
    Professional Creation Schema - Used by a clinic to add staff

    Fields:
    - email / password: Credentials for /auth/professional/login
    - first_name, last_name, phone, bio
    - license_number, specialties, certifications, experience_years
    - employment_type, role
    """
    email: EmailStr
    password: str = Field(..., min_length=8)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: Optional[str] = None
    bio: Optional[str] = None
    license_number: Optional[str] = None
    specialties: List[str] = Field(default_factory=list)
    certifications: List[str] = Field(default_factory=list)
    experience_years: int = Field(0, ge=0, le=70)
    employment_type: EmploymentType = EmploymentType.FULL_TIME
    role: ProfessionalRole = ProfessionalRole.PROFESSIONAL


class ProfessionalUpdate(CamelModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = None
    bio: Optional[str] = None
    license_number: Optional[str] = None
    specialties: Optional[List[str]] = None
    certifications: Optional[List[str]] = None
    experience_years: Optional[int] = Field(None, ge=0, le=70)
    employment_type: Optional[EmploymentType] = None
    role: Optional[ProfessionalRole] = None
    is_active: Optional[bool] = None


class ProfessionalResponse(CamelModel):
    """
    Professional Response Schema - Used when returning professional data
    """
    id: int
    clinic_id: int
    email: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    bio: Optional[str] = None
    license_number: Optional[str] = None
    specialties: List[str] = Field(default_factory=list)
    certifications: List[str] = Field(default_factory=list)
    experience_years: int
    employment_type: EmploymentType
    role: ProfessionalRole
    rating: Optional[float] = None
    is_active: bool
    created_at: Optional[datetime] = None
