from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional
import logging

from core.config import settings
from core.exceptions import AuthenticationError
from core.response import DataResponse, success_response
from database.connection import get_db
from models.user import User, UserRole
from schemas.user import Token, UserLogin, UserRegister, UserResponse
from services.auth import (
    authenticate_user,
    create_access_token,
    extract_token,
    get_user_by_id,
    register_user,
    require_permission,
    security,
    update_last_login,
    verify_token,
)
from services.location import clear_location

logger = logging.getLogger(__name__)

router = APIRouter()


def set_auth_cookie(response: Response, token: str):
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        secure=settings.ENVIRONMENT == "production",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        path="/"
    )


def issue_token(user: User, response: Response) -> dict:
    token = create_access_token(user)
    set_auth_cookie(response, token)
    return Token(token=token, user=UserResponse.model_validate(user)).model_dump()


@router.post("/register", response_model=DataResponse[Token], status_code=status.HTTP_201_CREATED)
def register(user_data: UserRegister, response: Response, db: Session = Depends(get_db)):
    """Self-registration for establishments and motoboys, with their profile."""
    logger.info(f"Registration attempt for email: {user_data.email}")
    user = register_user(db, user_data)
    return success_response(issue_token(user, response))


@router.post("/login", response_model=DataResponse[Token])
def login(user_credentials: UserLogin, response: Response, db: Session = Depends(get_db)):
    logger.info(f"Login attempt for email: {user_credentials.email}")

    user = authenticate_user(db, user_credentials.email, user_credentials.password)
    if not user:
        # one message for unknown, inactive and wrong password
        raise AuthenticationError("Invalid credentials")

    update_last_login(db, user)
    logger.info(f"User logged in successfully: {user.email}")
    return success_response(issue_token(user, response))


@router.post("/logout")
def logout(
    request: Request,
    response: Response,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
):
    """Drop the auth cookie; a courier's live position is cleared as well."""
    token = extract_token(request, credentials)
    token_data = verify_token(token) if token else None

    if token_data is not None and token_data.role == UserRole.MOTOBOY:
        user = get_user_by_id(db, token_data.user_id)
        if user is not None and user.motoboy is not None:
            clear_location(db, user.motoboy)

    response.delete_cookie(settings.AUTH_COOKIE_NAME, path="/")
    if token_data is not None:
        logger.info(f"User logged out: {token_data.email}")
    return success_response({"success": True})


@router.get("/me", response_model=DataResponse[UserResponse])
def read_current_user(current_user: User = Depends(require_permission("auth:me"))):
    return success_response(UserResponse.model_validate(current_user))
