from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Dict, List, Optional
import logging

from core.response import DataResponse, success_response
from database.connection import get_db
from models.motoboy import MotoboyProfile
from models.user import User
from schemas.motoboy import (
    LocationReportResult,
    LocationUpdate,
    MotoboyAccountCreate,
    MotoboyListItem,
    MotoboyLocation,
    MotoboyResponse,
    MotoboyUpdate,
)
from services import motoboy as motoboy_service
from services.auth import require_permission
from services.location import apply_location_update, clear_location, is_location_stale
from services.metrics import assignment_counts, motoboy_metrics

logger = logging.getLogger(__name__)

router = APIRouter()


def list_item(
    db: Session,
    motoboy: MotoboyProfile,
    counts: Optional[Dict[str, int]] = None,
    include_metrics: bool = False
) -> MotoboyListItem:
    metrics = motoboy_metrics(db, motoboy) if include_metrics else None
    if counts is not None:
        assignment_count = counts.get(motoboy.id, 0)
    else:
        assignment_count = metrics["assignments"]["total"] if metrics else len(motoboy.assignments)

    return MotoboyListItem(
        **MotoboyResponse.model_validate(motoboy).model_dump(),
        email=motoboy.user.email if motoboy.user else None,
        user_is_active=motoboy.user.is_active if motoboy.user else None,
        assignment_count=assignment_count,
        location_is_stale=is_location_stale(motoboy),
        metrics=metrics
    )


@router.get("", response_model=DataResponse[List[MotoboyListItem]])
def list_motoboys(
    metrics: bool = Query(False, description="Include assignment counts per status and rating"),
    current_user: User = Depends(require_permission("motoboys:list")),
    db: Session = Depends(get_db)
):
    motoboys = motoboy_service.list_motoboys(db)
    counts = assignment_counts(db, [m.id for m in motoboys])
    return success_response([list_item(db, m, counts, include_metrics=metrics) for m in motoboys])


@router.get("/locations", response_model=DataResponse[List[MotoboyLocation]])
def list_locations(
    current_user: User = Depends(require_permission("motoboys:locations")),
    db: Session = Depends(get_db)
):
    """Available couriers with a known position."""
    motoboys = motoboy_service.list_available_locations(db)
    return success_response([
        MotoboyLocation(
            id=m.id,
            full_name=m.full_name,
            vehicle_type=m.vehicle_type,
            current_lat=m.current_lat,
            current_lng=m.current_lng,
            location_updated_at=m.location_updated_at,
            location_is_stale=is_location_stale(m)
        )
        for m in motoboys
    ])


@router.post("", response_model=DataResponse[MotoboyResponse], status_code=status.HTTP_201_CREATED)
def create_motoboy(
    account_data: MotoboyAccountCreate,
    current_user: User = Depends(require_permission("motoboys:create")),
    db: Session = Depends(get_db)
):
    logger.info(f"Motoboy creation by admin {current_user.email} for {account_data.email}")
    motoboy = motoboy_service.create_motoboy_account(db, account_data)
    return success_response(MotoboyResponse.model_validate(motoboy))


@router.get("/me", response_model=DataResponse[MotoboyListItem])
def get_own_profile(
    current_user: User = Depends(require_permission("motoboys:self")),
    db: Session = Depends(get_db)
):
    motoboy = motoboy_service.get_own_profile(current_user)
    return success_response(list_item(db, motoboy, include_metrics=True))


@router.patch("/me", response_model=DataResponse[LocationReportResult])
def report_location(
    location_data: LocationUpdate,
    current_user: User = Depends(require_permission("motoboys:self")),
    db: Session = Depends(get_db)
):
    """Position report and/or availability toggle from the courier app."""
    motoboy = motoboy_service.get_own_profile(current_user)
    applied = apply_location_update(db, motoboy, location_data)
    return success_response(LocationReportResult(
        applied=applied,
        motoboy=MotoboyResponse.model_validate(motoboy)
    ))


@router.delete("/me/location", response_model=DataResponse[MotoboyResponse])
def delete_location(
    current_user: User = Depends(require_permission("motoboys:self")),
    db: Session = Depends(get_db)
):
    motoboy = motoboy_service.get_own_profile(current_user)
    motoboy = clear_location(db, motoboy)
    return success_response(MotoboyResponse.model_validate(motoboy))


@router.get("/{motoboy_id}", response_model=DataResponse[MotoboyListItem])
def get_motoboy(
    motoboy_id: str,
    current_user: User = Depends(require_permission("motoboys:read")),
    db: Session = Depends(get_db)
):
    motoboy = motoboy_service.get_motoboy_or_404(db, motoboy_id)
    motoboy_service.ensure_can_view(motoboy, current_user)
    return success_response(list_item(db, motoboy, include_metrics=True))


@router.patch("/{motoboy_id}", response_model=DataResponse[MotoboyResponse])
def update_motoboy(
    motoboy_id: str,
    update_data: MotoboyUpdate,
    current_user: User = Depends(require_permission("motoboys:update")),
    db: Session = Depends(get_db)
):
    motoboy = motoboy_service.get_motoboy_or_404(db, motoboy_id)
    motoboy_service.ensure_can_edit(motoboy, current_user)
    motoboy = motoboy_service.update_motoboy(db, motoboy, current_user, update_data)
    return success_response(MotoboyResponse.model_validate(motoboy))
