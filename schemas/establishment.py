from datetime import datetime
from typing import Dict, Optional
from pydantic import BaseModel, EmailStr, Field, validator

from models.establishment import EstablishmentPlan

class EstablishmentBase(BaseModel):
    name: str = Field(..., min_length=3)
    cnpj: str = Field(..., min_length=14, max_length=18)
    contact_email: EmailStr
    contact_phone: Optional[str] = None
    address_line1: str = Field(..., min_length=1)
    address_line2: Optional[str] = None
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=2, max_length=2)
    postal_code: str = Field(..., min_length=1)
    delivery_radius_km: float = Field(5.0, ge=0)
    base_delivery_fee: float = Field(0.0, ge=0)
    additional_per_km: float = Field(0.0, ge=0)
    estimated_delivery_time_minutes: int = Field(30, gt=0)
    plan: EstablishmentPlan = EstablishmentPlan.BASIC
    is_active: bool = True
    notes: Optional[str] = None

class EstablishmentCreate(EstablishmentBase):
    pass

class EstablishmentUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=3)
    cnpj: Optional[str] = Field(None, min_length=14, max_length=18)
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = None
    address_line1: Optional[str] = Field(None, min_length=1)
    address_line2: Optional[str] = None
    city: Optional[str] = Field(None, min_length=1)
    state: Optional[str] = Field(None, min_length=2, max_length=2)
    postal_code: Optional[str] = Field(None, min_length=1)
    delivery_radius_km: Optional[float] = Field(None, ge=0)
    base_delivery_fee: Optional[float] = Field(None, ge=0)
    additional_per_km: Optional[float] = Field(None, ge=0)
    estimated_delivery_time_minutes: Optional[int] = Field(None, gt=0)
    plan: Optional[EstablishmentPlan] = None
    is_active: Optional[bool] = None
    notes: Optional[str] = None

    @validator(
        'name', 'cnpj', 'contact_email', 'address_line1', 'city', 'state', 'postal_code',
        'delivery_radius_km', 'base_delivery_fee', 'additional_per_km',
        'estimated_delivery_time_minutes', 'plan', 'is_active'
    )
    def reject_null(cls, v):
        # columns that are NOT NULL in the database
        if v is None:
            raise ValueError('Field cannot be null')
        return v

class EstablishmentAccountCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    profile: EstablishmentCreate

class EstablishmentResponse(EstablishmentBase):
    id: str
    user_id: str
    contact_email: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class EstablishmentMetrics(BaseModel):
    totals: Dict[str, int]
    average_rating: Optional[float] = None
    rating_count: int = 0

class EstablishmentWithMetrics(EstablishmentResponse):
    email: Optional[str] = None
    order_count: int = 0
    metrics: Optional[EstablishmentMetrics] = None
