import logging
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from core.exceptions import AuthorizationError, ConflictError, ResourceNotFoundError
from models.delivery import DeliveryOrder
from models.review import Review
from models.user import User
from schemas.review import ReviewCreate
from services.auth import get_user_by_id
from services.order import ensure_access, get_order_or_404

logger = logging.getLogger(__name__)


def reviewable_user_ids(order: DeliveryOrder) -> set:
    """The establishment owner and every courier ever assigned to the order"""
    user_ids = {a.motoboy.user_id for a in order.assignments}
    if order.establishment is not None:
        user_ids.add(order.establishment.user_id)
    return user_ids


def list_reviews(db: Session, order_id: str, user: User) -> List[Review]:
    order = get_order_or_404(db, order_id)
    ensure_access(order, user)

    return db.query(Review).options(
        joinedload(Review.author),
        joinedload(Review.target)
    ).filter(Review.order_id == order.id).order_by(Review.created_at.desc()).all()


def create_review(db: Session, order_id: str, user: User, review_data: ReviewCreate) -> Review:
    """Rate a participant of an order; one review per author and order"""
    order = get_order_or_404(db, order_id)
    ensure_access(order, user)

    if review_data.target_id == user.id:
        raise AuthorizationError("You cannot review yourself")

    target = get_user_by_id(db, review_data.target_id)
    if not target:
        raise ResourceNotFoundError("User", review_data.target_id)

    if target.id not in reviewable_user_ids(order):
        raise AuthorizationError("Only participants of this order can be reviewed")

    existing = db.query(Review).filter(
        Review.order_id == order.id,
        Review.author_id == user.id
    ).first()
    if existing:
        raise ConflictError(
            "You have already reviewed this order",
            error_code="REVIEW_EXISTS",
            details={"review_id": existing.id}
        )

    review = Review(
        order_id=order.id,
        author_id=user.id,
        target_id=target.id,
        rating=review_data.rating,
        comment=review_data.comment
    )

    try:
        db.add(review)
        db.commit()
        db.refresh(review)
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Duplicate review on order {order.id} by {user.email}: {str(e)}")
        raise ConflictError("You have already reviewed this order", error_code="REVIEW_EXISTS")
    except Exception:
        db.rollback()
        raise

    logger.info(f"Review {review.id} ({review.rating} stars) created on order {order.id} by {user.email}")
    return review
