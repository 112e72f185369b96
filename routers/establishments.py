from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List
import logging

from core.response import DataResponse, success_response
from database.connection import get_db
from models.establishment import EstablishmentProfile
from models.user import User
from schemas.establishment import (
    EstablishmentAccountCreate,
    EstablishmentResponse,
    EstablishmentUpdate,
    EstablishmentWithMetrics,
)
from services import establishment as establishment_service
from services.auth import require_permission
from services.metrics import establishment_metrics

logger = logging.getLogger(__name__)

router = APIRouter()


def with_metrics(db: Session, establishment: EstablishmentProfile) -> EstablishmentWithMetrics:
    metrics = establishment_metrics(db, establishment)
    return EstablishmentWithMetrics(
        **EstablishmentResponse.model_validate(establishment).model_dump(),
        email=establishment.user.email if establishment.user else None,
        order_count=metrics["totals"]["total"],
        metrics=metrics
    )


@router.get("", response_model=DataResponse[List[EstablishmentWithMetrics]])
def list_establishments(
    current_user: User = Depends(require_permission("establishments:list")),
    db: Session = Depends(get_db)
):
    establishments = establishment_service.list_establishments(db, current_user)
    return success_response([with_metrics(db, e) for e in establishments])


@router.post("", response_model=DataResponse[EstablishmentResponse], status_code=status.HTTP_201_CREATED)
def create_establishment(
    account_data: EstablishmentAccountCreate,
    current_user: User = Depends(require_permission("establishments:create")),
    db: Session = Depends(get_db)
):
    logger.info(f"Establishment creation by admin {current_user.email} for {account_data.email}")
    establishment = establishment_service.create_establishment_account(db, account_data)
    return success_response(EstablishmentResponse.model_validate(establishment))


@router.get("/{establishment_id}", response_model=DataResponse[EstablishmentWithMetrics])
def get_establishment(
    establishment_id: str,
    current_user: User = Depends(require_permission("establishments:read")),
    db: Session = Depends(get_db)
):
    establishment = establishment_service.get_establishment_or_404(db, establishment_id)
    establishment_service.ensure_can_manage(establishment, current_user)
    return success_response(with_metrics(db, establishment))


@router.patch("/{establishment_id}", response_model=DataResponse[EstablishmentResponse])
def update_establishment(
    establishment_id: str,
    update_data: EstablishmentUpdate,
    current_user: User = Depends(require_permission("establishments:update")),
    db: Session = Depends(get_db)
):
    establishment = establishment_service.get_establishment_or_404(db, establishment_id)
    establishment_service.ensure_can_manage(establishment, current_user)
    establishment = establishment_service.update_establishment(db, establishment, current_user, update_data)
    return success_response(EstablishmentResponse.model_validate(establishment))
