"""
Treatment Router - API endpoints for the treatment catalogue.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..auth.dependencies import get_current_clinic, get_optional_current_user
from ..clinics.models import Clinic
from ..core.pagination import PageParams, PageResponse, paginate
from ..core.schemas import ApiResponse, ok
from ..database import get_db
from ..users.models import User
from .models import RiskLevel
from .schemas import CategoryCount, TreatmentCreate, TreatmentResponse, TreatmentUpdate
from .service import (
    create_treatment,
    get_categories,
    get_featured_treatments,
    get_treatment,
    list_treatments_query,
    search_treatments,
    update_treatment,
)

router = APIRouter()


@router.get("/", response_model=ApiResponse[PageResponse[TreatmentResponse]])
async def list_treatments(
    clinic_id: Optional[int] = Query(None, alias="clinicId", description="Filter by clinic"),
    category: Optional[str] = Query(None, description="Filter by category"),
    risk_level: Optional[RiskLevel] = Query(None, alias="riskLevel", description="Filter by risk level"),
    page_params: PageParams = Depends(),
    db: Session = Depends(get_db),
):
    """
    Get a paginated list of active treatments

    This endpoint allows anyone to browse the catalogue with optional filtering.
    """
    query = list_treatments_query(db, clinic_id=clinic_id, category=category, risk_level=risk_level)
    return ok(paginate(query, page_params, TreatmentResponse))


@router.get("/featured", response_model=ApiResponse[List[TreatmentResponse]])
async def featured_treatments(
    clinic_id: Optional[int] = Query(None, alias="clinicId"),
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_current_user),
):
    """
    Get featured treatments

    VIP-exclusive treatments are only listed for VIP users.
    """
    return ok(get_featured_treatments(db, current_user, clinic_id=clinic_id))


@router.get("/categories", response_model=ApiResponse[List[CategoryCount]])
async def treatment_categories(
    clinic_id: Optional[int] = Query(None, alias="clinicId"),
    db: Session = Depends(get_db),
):
    """Get distinct treatment categories with their counts."""
    return ok(get_categories(db, clinic_id))


@router.get("/search", response_model=ApiResponse[List[TreatmentResponse]])
async def search(
    q: str = Query(..., min_length=2, description="Search term"),
    clinic_id: Optional[int] = Query(None, alias="clinicId"),
    db: Session = Depends(get_db),
):
    """Search active treatments by name, description or category."""
    return ok(search_treatments(db, q, clinic_id))


@router.get("/{treatment_id}", response_model=ApiResponse[TreatmentResponse])
async def get_treatment_detail(
    treatment_id: int,
    db: Session = Depends(get_db),
):
    """Get a single active treatment."""
    return ok(get_treatment(db, treatment_id, active_only=True))


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=ApiResponse[TreatmentResponse])
async def create(
    treatment_data: TreatmentCreate,
    db: Session = Depends(get_db),
    current_clinic: Clinic = Depends(get_current_clinic),
):
    """
    Create a treatment

    Clinic admins only. HIGH and MEDICAL risk treatments are stored with
    consultation and medical staff required.
    """
    return ok(create_treatment(db, current_clinic, treatment_data), message="Treatment created")


@router.put("/{treatment_id}", response_model=ApiResponse[TreatmentResponse])
async def update(
    treatment_id: int,
    treatment_data: TreatmentUpdate,
    db: Session = Depends(get_db),
    current_clinic: Clinic = Depends(get_current_clinic),
):
    """Update a treatment of the authenticated clinic."""
    return ok(update_treatment(db, current_clinic, treatment_id, treatment_data), message="Treatment updated")
