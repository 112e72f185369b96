"""
Read-side aggregates: per-establishment and per-courier counters, and the
administrator summary.
"""
import logging
from typing import Dict, Iterable, List

from sqlalchemy import func
from sqlalchemy.orm import Session

from models.delivery import AssignmentStatus, DeliveryAssignment, DeliveryOrder, DeliveryStatus
from models.establishment import EstablishmentProfile
from models.motoboy import MotoboyProfile
from models.review import Review
from models.user import User

logger = logging.getLogger(__name__)


def _zeroed(statuses: Iterable) -> Dict[str, int]:
    return {s.value: 0 for s in statuses}


def order_counts_by_status(db: Session, *criteria) -> Dict[str, int]:
    """Orders per status, every status present (zero when unused)."""
    totals = _zeroed(DeliveryStatus)
    query = db.query(DeliveryOrder.status, func.count(DeliveryOrder.id))
    if criteria:
        query = query.filter(*criteria)
    for status, count in query.group_by(DeliveryOrder.status).all():
        totals[status.value] = count
    return totals


def establishment_metrics(db: Session, establishment: EstablishmentProfile) -> Dict:
    totals = order_counts_by_status(db, DeliveryOrder.establishment_id == establishment.id)
    totals["total"] = sum(totals.values())

    rating = Review.rating_summary(db, Review.target_id == establishment.user_id)
    return {
        "totals": totals,
        "average_rating": rating["average_rating"],
        "rating_count": rating["rating_count"],
    }


def motoboy_metrics(db: Session, motoboy: MotoboyProfile) -> Dict:
    assignments = _zeroed(AssignmentStatus)
    rows = db.query(DeliveryAssignment.status, func.count(DeliveryAssignment.id)).filter(
        DeliveryAssignment.motoboy_id == motoboy.id
    ).group_by(DeliveryAssignment.status).all()
    for status, count in rows:
        assignments[status.value] = count
    assignments["total"] = sum(assignments.values())

    rating = Review.rating_summary(db, Review.target_id == motoboy.user_id)
    return {
        "assignments": assignments,
        "average_rating": rating["average_rating"],
        "rating_count": rating["rating_count"],
    }


def assignment_counts(db: Session, motoboy_ids: List[str]) -> Dict[str, int]:
    """Total assignments per courier id, for list pages."""
    if not motoboy_ids:
        return {}
    rows = db.query(DeliveryAssignment.motoboy_id, func.count(DeliveryAssignment.id)).filter(
        DeliveryAssignment.motoboy_id.in_(motoboy_ids)
    ).group_by(DeliveryAssignment.motoboy_id).all()
    return {motoboy_id: count for motoboy_id, count in rows}


def order_counts(db: Session, establishment_ids: List[str]) -> Dict[str, int]:
    """Total orders per establishment id, for list pages."""
    if not establishment_ids:
        return {}
    rows = db.query(DeliveryOrder.establishment_id, func.count(DeliveryOrder.id)).filter(
        DeliveryOrder.establishment_id.in_(establishment_ids)
    ).group_by(DeliveryOrder.establishment_id).all()
    return {establishment_id: count for establishment_id, count in rows}


def summary_report(db: Session) -> Dict:
    rating = Review.rating_summary(db)
    report = {
        "totals": {
            "users": db.query(func.count(User.id)).scalar() or 0,
            "motoboys": db.query(func.count(MotoboyProfile.id)).scalar() or 0,
            "establishments": db.query(func.count(EstablishmentProfile.id)).scalar() or 0,
        },
        "orders": order_counts_by_status(db),
        "ratings": {
            "average": rating["average_rating"],
            "count": rating["rating_count"],
        },
    }
    logger.info(f"Summary report generated: {report['totals']}")
    return report
