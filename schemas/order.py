from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import AliasChoices, BaseModel, Field, validator

from models.delivery import AssignmentStatus, DeliveryStatus
from schemas.review import ReviewResponse

# Request schemas
class OrderCreate(BaseModel):
    establishment_id: Optional[str] = Field(None, description="Required when an admin creates the order")
    customer_name: str = Field(..., min_length=3)
    customer_phone: Optional[str] = None
    pickup_address: str = Field(..., min_length=3)
    delivery_address: str = Field(..., min_length=3)
    notes: Optional[str] = None
    distance_km: Optional[float] = Field(None, ge=0)
    delivery_fee: Optional[float] = Field(None, ge=0)
    scheduled_at: Optional[datetime] = None

class OrderUpdate(BaseModel):
    customer_name: Optional[str] = Field(None, min_length=3)
    customer_phone: Optional[str] = None
    pickup_address: Optional[str] = Field(None, min_length=3)
    delivery_address: Optional[str] = Field(None, min_length=3)
    notes: Optional[str] = None
    distance_km: Optional[float] = Field(None, ge=0)
    delivery_fee: Optional[float] = Field(None, ge=0)
    scheduled_at: Optional[datetime] = None
    status: Optional[DeliveryStatus] = None

    @validator('customer_name', 'pickup_address', 'delivery_address')
    def reject_null(cls, v):
        if v is None:
            raise ValueError('Field cannot be null')
        return v

class AssignmentCreate(BaseModel):
    motoboy_id: str = Field(..., min_length=1)

RESPONSE_STATUSES = (
    AssignmentStatus.ACCEPTED,
    AssignmentStatus.REJECTED,
    AssignmentStatus.COMPLETED,
)

class AssignmentResponseRequest(BaseModel):
    """A courier accepting, rejecting or completing its assignment"""
    status: AssignmentStatus
    rejection_reason: Optional[str] = Field(None, max_length=500)

    @validator('status')
    def validate_status(cls, v):
        if v not in RESPONSE_STATUSES:
            allowed = [s.value for s in RESPONSE_STATUSES]
            raise ValueError(f'Status must be one of: {allowed}')
        return v

class StatusEventCreate(BaseModel):
    status: DeliveryStatus
    message: Optional[str] = Field(None, max_length=1000)
    metadata: Optional[Dict[str, Any]] = None

# Response schemas
class EventResponse(BaseModel):
    id: int
    order_id: str
    status: DeliveryStatus
    message: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = Field(
        None, validation_alias=AliasChoices("metadata_", "metadata")
    )
    created_at: datetime

    class Config:
        from_attributes = True

class AssignmentResponse(BaseModel):
    id: str
    order_id: str
    motoboy_id: str
    status: AssignmentStatus
    assigned_at: datetime
    accepted_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    class Config:
        from_attributes = True

class MotoboySummary(BaseModel):
    id: str
    full_name: str
    user_id: str

    class Config:
        from_attributes = True

class AssignmentWithMotoboy(AssignmentResponse):
    motoboy: Optional[MotoboySummary] = None

class EstablishmentSummary(BaseModel):
    id: str
    name: str
    user_id: str

    class Config:
        from_attributes = True

class OrderResponse(BaseModel):
    id: str
    delivery_code: str
    establishment_id: str
    customer_name: str
    customer_phone: Optional[str] = None
    pickup_address: str
    delivery_address: str
    notes: Optional[str] = None
    distance_km: Optional[float] = None
    delivery_fee: Optional[float] = None
    scheduled_at: Optional[datetime] = None
    status: DeliveryStatus
    created_at: datetime
    updated_at: datetime
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class OrderDetailResponse(OrderResponse):
    establishment: Optional[EstablishmentSummary] = None
    assignments: List[AssignmentWithMotoboy] = []
    events: List[EventResponse] = []
    reviews: List[ReviewResponse] = []

class TrackingEvent(BaseModel):
    id: int
    status: DeliveryStatus
    message: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

class TrackingResponse(BaseModel):
    id: str
    delivery_code: str
    status: DeliveryStatus
    delivery_address: str
    events: List[TrackingEvent]

    class Config:
        from_attributes = True
