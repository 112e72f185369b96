from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from models.user import UserRole

class ReviewCreate(BaseModel):
    target_id: str = Field(..., min_length=1, description="User being reviewed")
    rating: int = Field(..., ge=1, le=5, description="Rating from 1 to 5 stars")
    comment: Optional[str] = Field(None, max_length=2000, description="Optional review text")

class ReviewUser(BaseModel):
    id: str
    email: str
    role: UserRole

    class Config:
        from_attributes = True

class ReviewResponse(BaseModel):
    id: str
    order_id: str
    author_id: str
    target_id: str
    rating: int
    comment: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

class ReviewWithUsers(ReviewResponse):
    author: ReviewUser
    target: ReviewUser
