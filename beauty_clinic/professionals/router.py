"""
Professional Router - API endpoints for clinic staff.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..auth.dependencies import get_current_clinic, get_current_professional
from ..clinics.models import Clinic
from ..core.schemas import ApiResponse, ok
from ..database import get_db
from .models import Professional
from .schemas import ProfessionalCreate, ProfessionalResponse, ProfessionalUpdate
from .service import create_professional, get_professional, list_professionals, update_professional

router = APIRouter()


@router.get("/me", response_model=ApiResponse[ProfessionalResponse])
async def get_my_profile(
    current_professional: Professional = Depends(get_current_professional),
):
    """
    Get the current professional's profile

    This endpoint allows professionals to view their own profile.
    """
    return ok(current_professional)


@router.get("/", response_model=ApiResponse[List[ProfessionalResponse]])
async def list_all(
    clinic_id: Optional[int] = Query(None, alias="clinicId", description="Filter by clinic"),
    specialty: Optional[str] = Query(None, description="Filter by specialty"),
    db: Session = Depends(get_db),
):
    """Get active professionals with optional filtering."""
    return ok(list_professionals(db, clinic_id, specialty))


@router.get("/{professional_id}", response_model=ApiResponse[ProfessionalResponse])
async def get_one(professional_id: int, db: Session = Depends(get_db)):
    return ok(get_professional(db, professional_id))


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=ApiResponse[ProfessionalResponse])
async def create(
    professional_data: ProfessionalCreate,
    db: Session = Depends(get_db),
    current_clinic: Clinic = Depends(get_current_clinic),
):
    """Add a professional to the authenticated clinic."""
    return ok(create_professional(db, current_clinic, professional_data), message="Professional created")


@router.put("/{professional_id}", response_model=ApiResponse[ProfessionalResponse])
async def update(
    professional_id: int,
    professional_data: ProfessionalUpdate,
    db: Session = Depends(get_db),
    current_clinic: Clinic = Depends(get_current_clinic),
):
    """Update a professional of the authenticated clinic."""
    return ok(
        update_professional(db, professional_id, professional_data, current_clinic),
        message="Professional updated",
    )
