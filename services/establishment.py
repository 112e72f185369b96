from sqlalchemy.orm import Session, joinedload
from sqlalchemy.exc import IntegrityError
from typing import List
import logging

from core.exceptions import AuthorizationError, ConflictError, ResourceNotFoundError
from database.connection import transaction
from models.establishment import EstablishmentProfile
from models.user import User, UserRole
from schemas.establishment import EstablishmentAccountCreate, EstablishmentUpdate
from services.auth import create_user

logger = logging.getLogger(__name__)

def list_establishments(db: Session, user: User) -> List[EstablishmentProfile]:
    """All establishments for admins, the caller's own for an establishment."""
    query = db.query(EstablishmentProfile).options(joinedload(EstablishmentProfile.user))
    if user.role == UserRole.ESTABLISHMENT:
        query = query.filter(EstablishmentProfile.user_id == user.id)
    return query.order_by(EstablishmentProfile.created_at.desc()).all()

def get_establishment_or_404(db: Session, establishment_id: str) -> EstablishmentProfile:
    establishment = db.query(EstablishmentProfile).filter(
        EstablishmentProfile.id == establishment_id
    ).first()
    if not establishment:
        raise ResourceNotFoundError("Establishment", establishment_id)
    return establishment

def ensure_can_manage(establishment: EstablishmentProfile, user: User) -> None:
    if user.role == UserRole.ADMIN:
        return
    if user.role == UserRole.ESTABLISHMENT and establishment.user_id == user.id:
        return
    logger.warning(f"User {user.email} denied access to establishment {establishment.id}")
    raise AuthorizationError("You do not have access to this establishment")

def create_establishment_account(db: Session, data: EstablishmentAccountCreate) -> EstablishmentProfile:
    """Create an establishment login together with its profile."""
    try:
        user = create_user(db, data.email, data.password, UserRole.ESTABLISHMENT)
        establishment = EstablishmentProfile(user_id=user.id, **data.profile.model_dump())
        db.add(establishment)
        db.commit()
        db.refresh(establishment)
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Database integrity error creating establishment {data.email}: {str(e)}")
        raise ConflictError("Email already registered", error_code="EMAIL_IN_USE")
    except Exception:
        db.rollback()
        raise

    logger.info(f"Establishment created: {establishment.name} ({data.email})")
    return establishment

def update_establishment(
    db: Session,
    establishment: EstablishmentProfile,
    user: User,
    data: EstablishmentUpdate
) -> EstablishmentProfile:
    changes = data.model_dump(exclude_unset=True)

    # plan and activation are managed by administrators
    if user.role != UserRole.ADMIN and ({"plan", "is_active"} & changes.keys()):
        raise AuthorizationError("Only administrators can change plan or activation")

    with transaction(db, "update establishment"):
        for field, value in changes.items():
            setattr(establishment, field, value)
    db.refresh(establishment)

    logger.info(f"Establishment {establishment.id} updated by {user.email}: {sorted(changes)}")
    return establishment
