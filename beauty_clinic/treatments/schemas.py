"""
Treatment Schemas - Pydantic models for treatment data validation and serialization.
"""
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field, model_validator

from ..core.schemas import CamelModel
from .models import RiskLevel


class TreatmentBase(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    category: str = Field(..., min_length=1, max_length=100)
    icon_name: Optional[str] = None
    risk_level: RiskLevel = RiskLevel.LOW
    price: Decimal = Field(..., ge=0)
    vip_price: Optional[Decimal] = Field(None, ge=0)
    duration_minutes: int = Field(60, gt=0, le=600)
    requires_consultation: bool = False
    requires_medical_staff: bool = False
    consent_form_required: bool = False
    consent_form_template_id: Optional[int] = None
    beauty_points: int = Field(0, ge=0)
    is_vip_exclusive: bool = False
    is_featured: bool = False


class TreatmentCreate(TreatmentBase):
    """
    Treatment Creation Schema - Used by a clinic to add a treatment

    The clinic comes from the authenticated clinic token.
    """

    @model_validator(mode="after")
    def check_vip_price(self):
        if self.vip_price is not None and self.vip_price > self.price:
            raise ValueError("vipPrice must not exceed price")
        return self


class TreatmentUpdate(CamelModel):
    """Partial update, only the fields sent are changed."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    icon_name: Optional[str] = None
    risk_level: Optional[RiskLevel] = None
    price: Optional[Decimal] = Field(None, ge=0)
    vip_price: Optional[Decimal] = Field(None, ge=0)
    duration_minutes: Optional[int] = Field(None, gt=0, le=600)
    requires_consultation: Optional[bool] = None
    requires_medical_staff: Optional[bool] = None
    consent_form_required: Optional[bool] = None
    consent_form_template_id: Optional[int] = None
    beauty_points: Optional[int] = Field(None, ge=0)
    is_vip_exclusive: Optional[bool] = None
    is_featured: Optional[bool] = None
    is_active: Optional[bool] = None


class TreatmentResponse(CamelModel):
    """
    Treatment Response Schema - Used when returning treatment data
    """
    id: int
    clinic_id: int
    name: str
    description: Optional[str] = None
    category: str
    icon_name: Optional[str] = None
    risk_level: RiskLevel
    price: float
    vip_price: Optional[float] = None
    duration_minutes: int
    requires_consultation: bool
    requires_medical_staff: bool
    consent_form_required: bool
    consent_form_template_id: Optional[int] = None
    beauty_points: int
    is_vip_exclusive: bool
    is_featured: bool
    is_active: bool
    created_at: Optional[datetime] = None


class CategoryCount(CamelModel):
    category: str
    count: int
