"""
Auth Schemas - Pydantic models for registration, login and tokens.
"""
from typing import Optional

from pydantic import EmailStr, Field

from ..clinics.schemas import ClinicResponse
from ..core.schemas import CamelModel
from ..professionals.schemas import ProfessionalResponse
from ..users.schemas import UserResponse


class UserRegister(CamelModel):
    """
    User Registration Schema - Used for customer self-registration

    Fields:
    - email / password: Credentials
    - first_name, last_name, phone
    - clinic_slug: Home clinic, the oldest active clinic when omitted
    """
    email: EmailStr
    password: str = Field(..., min_length=8, description="At least 8 characters")
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: Optional[str] = None
    clinic_slug: Optional[str] = None


class UserLogin(CamelModel):
    """
    User Login Schema - Used for all login endpoints

    Fields:
    - email: Account email address
    - password: Account password
    """
    email: EmailStr
    password: str


class RefreshRequest(CamelModel):
    refresh_token: str


class TokenResponse(CamelModel):
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    expires_in: int


class UserAuthResponse(CamelModel):
    user: UserResponse
    tokens: TokenResponse


class ProfessionalAuthResponse(CamelModel):
    professional: ProfessionalResponse
    tokens: TokenResponse


class ClinicAuthResponse(CamelModel):
    clinic: ClinicResponse
    tokens: TokenResponse


class TokenValidation(CamelModel):
    valid: bool
    user_id: int
    email: str
