"""
Default administrator created on startup so a fresh install can log in.
"""
import logging

from sqlalchemy.orm import Session

from core.config import settings
from models.user import User, UserRole
from services.auth import create_user, get_user_by_email

logger = logging.getLogger(__name__)


def ensure_default_admin(db: Session) -> User:
    """Create the configured admin, or re-activate it if it was deactivated."""
    email = settings.DEFAULT_ADMIN_EMAIL
    try:
        existing_user = get_user_by_email(db, email)
        if existing_user:
            if existing_user.role != UserRole.ADMIN:
                logger.warning(f"Default admin email {email} belongs to a {existing_user.role.value} user")
                return existing_user
            if not existing_user.is_active:
                existing_user.is_active = True
                db.commit()
                logger.info(f"Default admin re-activated: {email}")
            return existing_user

        user = create_user(db, email, settings.DEFAULT_ADMIN_PASSWORD, UserRole.ADMIN)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Could not bootstrap default admin {email}: {str(e)}")
        raise

    logger.info(f"Default admin created: {email}")
    return user
