from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, EmailStr, Field, validator

class MotoboyBase(BaseModel):
    full_name: str = Field(..., min_length=3)
    cpf: str = Field(..., min_length=11, max_length=14)
    cnh_number: str = Field(..., min_length=5)
    cnh_category: str = Field(..., min_length=1)
    vehicle_type: str = Field(..., min_length=2)
    phone: Optional[str] = None
    work_schedule: Optional[Dict[str, Any]] = None

class MotoboyCreate(MotoboyBase):
    pass

class MotoboyUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=3)
    cpf: Optional[str] = Field(None, min_length=11, max_length=14)
    cnh_number: Optional[str] = Field(None, min_length=5)
    cnh_category: Optional[str] = Field(None, min_length=1)
    vehicle_type: Optional[str] = Field(None, min_length=2)
    phone: Optional[str] = None
    work_schedule: Optional[Dict[str, Any]] = None

    @validator('full_name', 'cpf', 'cnh_number', 'cnh_category', 'vehicle_type')
    def reject_null(cls, v):
        if v is None:
            raise ValueError('Field cannot be null')
        return v

class MotoboyAccountCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    profile: MotoboyCreate

class LocationUpdate(BaseModel):
    """Periodic position report (and/or availability toggle) sent by a courier"""
    current_lat: Optional[float] = Field(None, ge=-90, le=90)
    current_lng: Optional[float] = Field(None, ge=-180, le=180)
    is_available: Optional[bool] = None
    reported_at: Optional[datetime] = Field(None, description="Client timestamp of the reading")

class MotoboyResponse(MotoboyBase):
    id: str
    user_id: str
    is_available: bool
    current_lat: Optional[float] = None
    current_lng: Optional[float] = None
    location_updated_at: Optional[datetime] = None
    verified_at: Optional[datetime] = None
    hired_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class MotoboyMetrics(BaseModel):
    assignments: Dict[str, int]
    average_rating: Optional[float] = None
    rating_count: int = 0

class MotoboyListItem(MotoboyResponse):
    email: Optional[str] = None
    user_is_active: Optional[bool] = None
    assignment_count: int = 0
    location_is_stale: bool = False
    metrics: Optional[MotoboyMetrics] = None

class MotoboyLocation(BaseModel):
    id: str
    full_name: str
    vehicle_type: str
    current_lat: float
    current_lng: float
    location_updated_at: Optional[datetime] = None
    location_is_stale: bool = False

class LocationReportResult(BaseModel):
    applied: bool
    motoboy: MotoboyResponse
