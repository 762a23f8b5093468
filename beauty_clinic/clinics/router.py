"""
Clinic Router - API endpoints for clinic registration and management.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..auth.dependencies import get_current_clinic
from ..core.pagination import PageParams, PageResponse, paginate
from ..core.schemas import ApiResponse, ok
from ..database import get_db
from .models import Clinic
from .schemas import ClinicCreate, ClinicResponse, ClinicUpdate
from .service import (
    create_clinic,
    deactivate_clinic,
    get_clinic,
    get_clinic_by_slug,
    list_clinics_query,
    update_clinic,
)

router = APIRouter()


@router.get("/", response_model=ApiResponse[PageResponse[ClinicResponse]])
async def list_clinics(
    page_params: PageParams = Depends(),
    db: Session = Depends(get_db),
):
    """Get a paginated list of active clinics."""
    return ok(paginate(list_clinics_query(db), page_params, ClinicResponse))


@router.get("/slug/{slug}", response_model=ApiResponse[ClinicResponse])
async def get_by_slug(slug: str, db: Session = Depends(get_db)):
    return ok(get_clinic_by_slug(db, slug))


@router.get("/{clinic_id}", response_model=ApiResponse[ClinicResponse])
async def get_by_id(clinic_id: int, db: Session = Depends(get_db)):
    return ok(get_clinic(db, clinic_id))


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=ApiResponse[ClinicResponse])
async def register_clinic(
    clinic_data: ClinicCreate,
    db: Session = Depends(get_db),
):
    """
    Register a clinic

    Creates the clinic together with the admin login used on /auth/clinic/login.
    """
    return ok(create_clinic(db, clinic_data), message="Clinic registered")


@router.put("/{clinic_id}", response_model=ApiResponse[ClinicResponse])
async def update(
    clinic_id: int,
    clinic_data: ClinicUpdate,
    db: Session = Depends(get_db),
    current_clinic: Clinic = Depends(get_current_clinic),
):
    """Update the authenticated clinic."""
    return ok(update_clinic(db, clinic_id, clinic_data, current_clinic), message="Clinic updated")


@router.delete("/{clinic_id}", response_model=ApiResponse[ClinicResponse])
async def deactivate(
    clinic_id: int,
    db: Session = Depends(get_db),
    current_clinic: Clinic = Depends(get_current_clinic),
):
    """Deactivate the authenticated clinic."""
    return ok(deactivate_clinic(db, clinic_id, current_clinic), message="Clinic deactivated")
