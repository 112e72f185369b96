"""
Courier live state: position, availability and freshness of the last report.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session

from core.config import settings
from core.exceptions import ValidationError
from models.motoboy import MotoboyProfile
from schemas.motoboy import LocationUpdate

logger = logging.getLogger(__name__)


def _as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def is_location_stale(motoboy: MotoboyProfile, now: Optional[datetime] = None) -> bool:
    """A position older than ``LOCATION_STALE_SECONDS`` (or no position at all) is stale."""
    if not motoboy.has_location or motoboy.location_updated_at is None:
        return True
    now = now or datetime.utcnow()
    return now - motoboy.location_updated_at > timedelta(seconds=settings.LOCATION_STALE_SECONDS)


def report_location(
    db: Session,
    motoboy: MotoboyProfile,
    lat: float,
    lng: float,
    reported_at: Optional[datetime] = None,
    is_available: bool = True
) -> bool:
    """Store a position reading.

    Coordinates, availability and the reading time are written together. A reading
    older than the stored one is dropped and ``False`` is returned.
    """
    now = datetime.utcnow()
    reading_time = min(_as_naive_utc(reported_at), now) if reported_at else now

    if motoboy.location_updated_at is not None and reading_time < motoboy.location_updated_at:
        logger.info(
            f"Ignoring out-of-order location for motoboy {motoboy.id}: "
            f"{reading_time.isoformat()} < {motoboy.location_updated_at.isoformat()}"
        )
        return False

    try:
        motoboy.current_lat = lat
        motoboy.current_lng = lng
        motoboy.is_available = is_available
        motoboy.location_updated_at = reading_time
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Error storing location for motoboy {motoboy.id}: {str(e)}")
        raise

    return True


def set_availability(db: Session, motoboy: MotoboyProfile, is_available: bool) -> MotoboyProfile:
    if is_available and not motoboy.has_location:
        raise ValidationError(
            "A location is required before becoming available",
            field="current_lat"
        )

    try:
        motoboy.is_available = is_available
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Error updating availability for motoboy {motoboy.id}: {str(e)}")
        raise

    logger.info(f"Motoboy {motoboy.id} availability set to {is_available}")
    return motoboy


def clear_location(db: Session, motoboy: MotoboyProfile) -> MotoboyProfile:
    """Forget the position and go unavailable."""
    try:
        motoboy.current_lat = None
        motoboy.current_lng = None
        motoboy.is_available = False
        motoboy.location_updated_at = None
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Error clearing location for motoboy {motoboy.id}: {str(e)}")
        raise

    logger.info(f"Location cleared for motoboy {motoboy.id}")
    return motoboy


def apply_location_update(db: Session, motoboy: MotoboyProfile, data: LocationUpdate) -> bool:
    """Handle a courier's combined position/availability payload.

    Returns whether the payload changed the stored state.
    """
    has_lat = data.current_lat is not None
    has_lng = data.current_lng is not None

    if has_lat != has_lng:
        raise ValidationError("Latitude and longitude must be sent together", field="current_lat")

    if has_lat:
        available = True if data.is_available is None else data.is_available
        return report_location(
            db,
            motoboy,
            data.current_lat,
            data.current_lng,
            reported_at=data.reported_at,
            is_available=available
        )

    if data.is_available is not None:
        set_availability(db, motoboy, data.is_available)
        return True

    raise ValidationError("Send a location, an availability flag or both")
