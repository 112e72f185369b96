from pydantic import BaseModel, EmailStr, validator, Field
from typing import Any, Dict, Optional, Union
from datetime import datetime
from models.user import UserRole

# User Registration Schema
class UserRegister(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    role: Union[UserRole, str]
    profile: Optional[Dict[str, Any]] = None

    @validator('email')
    def normalize_email(cls, v):
        return v.lower().strip()

    @validator('role')
    def validate_role(cls, v):
        if isinstance(v, str):
            try:
                return UserRole(v.upper())
            except ValueError:
                valid_roles = [role.value for role in UserRole]
                raise ValueError(f'Invalid role. Must be one of: {valid_roles}')
        return v

# User Login Schema
class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @validator('email')
    def normalize_email(cls, v):
        return v.lower().strip()

# User Response Schema
class UserResponse(BaseModel):
    id: str
    email: str
    role: UserRole
    is_active: bool
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None

    class Config:
        from_attributes = True

# Token Schema
class Token(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserResponse

# Token Data Schema
class TokenData(BaseModel):
    user_id: str
    email: Optional[str] = None
    role: Optional[UserRole] = None
