from sqlalchemy.orm import Session, joinedload
from sqlalchemy.exc import IntegrityError
from typing import List
import logging

from core.exceptions import AuthorizationError, ConflictError, ResourceNotFoundError
from database.connection import transaction
from models.motoboy import MotoboyProfile
from models.user import User, UserRole
from schemas.motoboy import MotoboyAccountCreate, MotoboyUpdate
from services.auth import create_user

logger = logging.getLogger(__name__)

def list_motoboys(db: Session) -> List[MotoboyProfile]:
    return db.query(MotoboyProfile).options(
        joinedload(MotoboyProfile.user)
    ).order_by(MotoboyProfile.full_name).all()

def list_available_locations(db: Session) -> List[MotoboyProfile]:
    """Available couriers with a known position, for the live map."""
    return db.query(MotoboyProfile).join(User).filter(
        MotoboyProfile.is_available.is_(True),
        MotoboyProfile.current_lat.isnot(None),
        MotoboyProfile.current_lng.isnot(None),
        User.is_active.is_(True)
    ).order_by(MotoboyProfile.full_name).all()

def get_motoboy_or_404(db: Session, motoboy_id: str) -> MotoboyProfile:
    motoboy = db.query(MotoboyProfile).filter(MotoboyProfile.id == motoboy_id).first()
    if not motoboy:
        raise ResourceNotFoundError("Motoboy", motoboy_id)
    return motoboy

def get_own_profile(user: User) -> MotoboyProfile:
    if user.motoboy is None:
        raise ResourceNotFoundError("Motoboy profile")
    return user.motoboy

def ensure_can_view(motoboy: MotoboyProfile, user: User) -> None:
    """Couriers may only look at their own profile."""
    if user.role == UserRole.MOTOBOY and motoboy.user_id != user.id:
        raise AuthorizationError("You can only view your own profile")

def ensure_can_edit(motoboy: MotoboyProfile, user: User) -> None:
    if user.role == UserRole.ADMIN:
        return
    if user.role == UserRole.MOTOBOY and motoboy.user_id == user.id:
        return
    raise AuthorizationError("You can only edit your own profile")

def create_motoboy_account(db: Session, data: MotoboyAccountCreate) -> MotoboyProfile:
    """Create a courier login together with its profile; couriers start unavailable."""
    try:
        user = create_user(db, data.email, data.password, UserRole.MOTOBOY)
        motoboy = MotoboyProfile(user_id=user.id, is_available=False, **data.profile.model_dump())
        db.add(motoboy)
        db.commit()
        db.refresh(motoboy)
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Database integrity error creating motoboy {data.email}: {str(e)}")
        raise ConflictError("Email already registered", error_code="EMAIL_IN_USE")
    except Exception:
        db.rollback()
        raise

    logger.info(f"Motoboy created: {motoboy.full_name} ({data.email})")
    return motoboy

def update_motoboy(db: Session, motoboy: MotoboyProfile, user: User, data: MotoboyUpdate) -> MotoboyProfile:
    changes = data.model_dump(exclude_unset=True)
    with transaction(db, "update motoboy"):
        for field, value in changes.items():
            setattr(motoboy, field, value)
    db.refresh(motoboy)

    logger.info(f"Motoboy {motoboy.id} updated by {user.email}: {sorted(changes)}")
    return motoboy
