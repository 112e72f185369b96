from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from core.response import DataResponse, PaginatedResponse, pagination_meta, success_response
from database.connection import get_db
from models.delivery import DeliveryStatus
from models.user import User
from schemas.order import (
    AssignmentCreate,
    AssignmentResponse,
    AssignmentResponseRequest,
    EventResponse,
    OrderCreate,
    OrderDetailResponse,
    OrderResponse,
    OrderUpdate,
    StatusEventCreate,
)
from schemas.review import ReviewCreate, ReviewResponse, ReviewWithUsers
from services import order as order_service
from services import review as review_service
from services.auth import require_permission

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=PaginatedResponse[OrderResponse])
def list_orders(
    status_filter: Optional[DeliveryStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(require_permission("orders:list")),
    db: Session = Depends(get_db)
):
    """Orders visible to the caller: all for admins, own for establishments, assigned for motoboys."""
    orders, total = order_service.list_orders(db, current_user, status_filter, page, limit)
    return {
        "data": [OrderResponse.model_validate(o) for o in orders],
        "pagination": pagination_meta(page, limit, total)
    }


@router.post("", response_model=DataResponse[OrderResponse], status_code=status.HTTP_201_CREATED)
def create_order(
    order_data: OrderCreate,
    current_user: User = Depends(require_permission("orders:create")),
    db: Session = Depends(get_db)
):
    order = order_service.create_order(db, current_user, order_data)
    return success_response(OrderResponse.model_validate(order))


@router.get("/{order_id}", response_model=DataResponse[OrderDetailResponse])
def get_order(
    order_id: str,
    current_user: User = Depends(require_permission("orders:read")),
    db: Session = Depends(get_db)
):
    order = order_service.get_order_or_404(db, order_id)
    order_service.ensure_access(order, current_user)
    return success_response(OrderDetailResponse.model_validate(order))


@router.patch("/{order_id}", response_model=DataResponse[OrderResponse])
def update_order(
    order_id: str,
    order_data: OrderUpdate,
    current_user: User = Depends(require_permission("orders:update")),
    db: Session = Depends(get_db)
):
    order = order_service.update_order(db, order_id, current_user, order_data)
    return success_response(OrderResponse.model_validate(order))


@router.post("/{order_id}/assign", response_model=DataResponse[AssignmentResponse], status_code=status.HTTP_201_CREATED)
def assign_motoboy(
    order_id: str,
    assignment_data: AssignmentCreate,
    current_user: User = Depends(require_permission("orders:assign")),
    db: Session = Depends(get_db)
):
    assignment = order_service.assign_motoboy(db, order_id, current_user, assignment_data.motoboy_id)
    return success_response(AssignmentResponse.model_validate(assignment))


@router.patch("/{order_id}/assign", response_model=DataResponse[AssignmentResponse])
def respond_to_assignment(
    order_id: str,
    response_data: AssignmentResponseRequest,
    current_user: User = Depends(require_permission("orders:respond")),
    db: Session = Depends(get_db)
):
    """Accept, reject or complete the caller's assignment on this order."""
    assignment = order_service.respond_to_assignment(
        db,
        order_id,
        current_user,
        response_data.status,
        response_data.rejection_reason
    )
    return success_response(AssignmentResponse.model_validate(assignment))


@router.post("/{order_id}/events", response_model=DataResponse[EventResponse], status_code=status.HTTP_201_CREATED)
def record_event(
    order_id: str,
    event_data: StatusEventCreate,
    current_user: User = Depends(require_permission("orders:events")),
    db: Session = Depends(get_db)
):
    event = order_service.record_event(db, order_id, current_user, event_data)
    return success_response(EventResponse.model_validate(event))


@router.get("/{order_id}/reviews", response_model=DataResponse[List[ReviewWithUsers]])
def list_reviews(
    order_id: str,
    current_user: User = Depends(require_permission("orders:reviews:read")),
    db: Session = Depends(get_db)
):
    reviews = review_service.list_reviews(db, order_id, current_user)
    return success_response([ReviewWithUsers.model_validate(r) for r in reviews])


@router.post("/{order_id}/reviews", response_model=DataResponse[ReviewResponse], status_code=status.HTTP_201_CREATED)
def create_review(
    order_id: str,
    review_data: ReviewCreate,
    current_user: User = Depends(require_permission("orders:reviews:create")),
    db: Session = Depends(get_db)
):
    review = review_service.create_review(db, order_id, current_user, review_data)
    return success_response(ReviewResponse.model_validate(review))
