from datetime import datetime, timedelta
from typing import Callable, Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from core.config import settings
from core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    ValidationError,
)
from core.permissions import allowed_roles
from database.connection import get_db
from models.user import User, UserRole
from models.establishment import EstablishmentProfile
from models.motoboy import MotoboyProfile
from schemas.establishment import EstablishmentCreate
from schemas.motoboy import MotoboyCreate
from schemas.user import TokenData, UserRegister
import logging

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS
)

security = HTTPBearer(auto_error=False)

SELF_REGISTRATION_ROLES = (UserRole.ESTABLISHMENT, UserRole.MOTOBOY)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a token carrying the user's id, email and role."""
    now = datetime.utcnow()
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))

    to_encode = {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role.value,
        "exp": expire,
        "iat": now,
        "type": "access"
    }

    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    logger.info(f"Access token created for user: {user.email}")
    return encoded_jwt


def verify_token(token: str) -> Optional[TokenData]:
    """Decode a token; ``None`` when the signature, expiry or claims are invalid."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT verification failed: {str(e)}")
        return None

    user_id = payload.get("sub")
    if not user_id or payload.get("type") != "access":
        logger.warning("Token missing required claims")
        return None

    try:
        return TokenData(user_id=user_id, email=payload.get("email"), role=payload.get("role"))
    except PydanticValidationError:
        logger.warning("Token carries an unknown role")
        return None


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email.lower().strip()).first()


def get_user_by_id(db: Session, user_id: str) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Return the user for valid credentials of an active account."""
    email = email.lower().strip()

    user = get_user_by_email(db, email)
    if not user:
        logger.warning(f"Authentication attempt with non-existent email: {email}")
        return None

    if not user.is_active:
        logger.warning(f"Authentication attempt with inactive user: {email}")
        return None

    if not verify_password(password, user.password_hash):
        logger.warning(f"Authentication attempt with invalid password for user: {email}")
        return None

    logger.info(f"Successful authentication for user: {email}")
    return user


def create_user(db: Session, email: str, password: str, role: UserRole) -> User:
    """Stage a new user in the current transaction; the caller commits."""
    if get_user_by_email(db, email):
        logger.warning(f"Attempt to create user with existing email: {email}")
        raise ConflictError("Email already registered", error_code="EMAIL_IN_USE")

    user = User(
        email=email.lower().strip(),
        password_hash=get_password_hash(password),
        role=role,
        is_active=True
    )
    db.add(user)
    db.flush()
    return user


def parse_profile(schema, profile: Optional[dict]):
    """Validate a free-form profile payload against a profile schema."""
    try:
        return schema.model_validate(profile or {})
    except PydanticValidationError as e:
        errors = [
            {"field": ".".join(str(x) for x in error["loc"]), "message": error["msg"]}
            for error in e.errors()
        ]
        raise ValidationError("Invalid profile data", field="profile", details={"errors": errors})


def register_user(db: Session, data: UserRegister) -> User:
    """Create a user and, for establishments and motoboys, its profile in one transaction."""
    if data.role not in SELF_REGISTRATION_ROLES:
        raise AuthorizationError("Administrators cannot be self-registered")

    if data.role == UserRole.ESTABLISHMENT:
        profile = parse_profile(EstablishmentCreate, data.profile)
    else:
        profile = parse_profile(MotoboyCreate, data.profile)

    try:
        user = create_user(db, data.email, data.password, data.role)

        if data.role == UserRole.ESTABLISHMENT:
            db.add(EstablishmentProfile(user_id=user.id, **profile.model_dump()))
        else:
            db.add(MotoboyProfile(user_id=user.id, is_available=False, **profile.model_dump()))

        db.commit()
        db.refresh(user)
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Database integrity error creating user {data.email}: {str(e)}")
        raise ConflictError("Email already registered", error_code="EMAIL_IN_USE")
    except Exception:
        db.rollback()
        raise

    logger.info(f"User registered: {user.email} with role {user.role.value}")
    return user


def update_last_login(db: Session, user: User):
    user.last_login = datetime.utcnow()
    db.commit()
    db.refresh(user)


def extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    """Bearer header first, then the auth cookie."""
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.AUTH_COOKIE_NAME)


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """Resolve the active user behind the request credential."""
    token = extract_token(request, credentials)
    if not token:
        raise AuthenticationError("Authentication credentials required")

    token_data = verify_token(token)
    if token_data is None:
        raise AuthenticationError("Invalid or expired token")

    user = get_user_by_id(db, token_data.user_id)
    if user is None or not user.is_active:
        logger.warning(f"Token valid but user missing or inactive: {token_data.user_id}")
        raise AuthenticationError("User not found or inactive")

    return user


def require_permission(permission: str) -> Callable[..., User]:
    """Dependency factory: the current user, if their role holds ``permission``."""
    roles = allowed_roles(permission)

    def dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            logger.warning(
                f"User {current_user.email} ({current_user.role.value}) denied '{permission}'"
            )
            raise AuthorizationError("User is not allowed to access this resource")
        return current_user

    return dependency
