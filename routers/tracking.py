from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
import logging

from core.response import DataResponse, success_response
from database.connection import get_db
from schemas.order import TrackingResponse
from services.order import get_tracking

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{delivery_code}", response_model=DataResponse[TrackingResponse])
def track_delivery(delivery_code: str, db: Session = Depends(get_db)):
    """Public order status and event timeline, looked up by delivery code."""
    order = get_tracking(db, delivery_code)
    return success_response(TrackingResponse.model_validate(order))
