"""
Order lifecycle: creation, courier assignment, courier responses, direct status
updates and the event trail.

Every mutation runs in one transaction and consults ``services.transitions``
before writing, so the three paths that move an order (assign, courier
response, direct update) share one set of rules.
"""
import logging
import secrets
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from core.config import settings
from core.exceptions import (
    AuthorizationError,
    ConflictError,
    InternalError,
    ResourceNotFoundError,
)
from database.connection import transaction
from models.delivery import (
    AssignmentStatus,
    DeliveryAssignment,
    DeliveryEvent,
    DeliveryOrder,
    DeliveryStatus,
)
from models.establishment import EstablishmentProfile
from models.motoboy import MotoboyProfile
from models.user import User, UserRole
from schemas.order import OrderCreate, OrderUpdate, StatusEventCreate
from services.transitions import (
    OrderAction,
    direct_status_action,
    next_assignment_status,
    next_order_status,
    response_action,
)

logger = logging.getLogger(__name__)


def generate_delivery_code() -> str:
    return secrets.token_hex(4).upper()


def unique_delivery_code(db: Session) -> str:
    for _ in range(settings.DELIVERY_CODE_ATTEMPTS):
        code = generate_delivery_code()
        exists = db.query(DeliveryOrder.id).filter(DeliveryOrder.delivery_code == code).first()
        if not exists:
            return code
        logger.warning(f"Delivery code collision on {code}, retrying")
    raise InternalError("Could not generate a unique delivery code")


def get_order_or_404(db: Session, order_id: str) -> DeliveryOrder:
    order = db.query(DeliveryOrder).filter(DeliveryOrder.id == order_id).first()
    if not order:
        raise ResourceNotFoundError("Order", order_id)
    return order


def is_participant(order: DeliveryOrder, user: User) -> bool:
    """Admins, the owning establishment and any courier ever assigned to the order."""
    if user.role == UserRole.ADMIN:
        return True

    if user.role == UserRole.ESTABLISHMENT:
        return order.establishment is not None and order.establishment.user_id == user.id

    if user.role == UserRole.MOTOBOY:
        return any(a.motoboy.user_id == user.id for a in order.assignments)

    return False


def ensure_access(order: DeliveryOrder, user: User) -> None:
    if not is_participant(order, user):
        logger.warning(f"User {user.email} denied access to order {order.id}")
        raise AuthorizationError("You do not have access to this order")


def append_event(
    order: DeliveryOrder,
    status: DeliveryStatus,
    message: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
    created_at: Optional[datetime] = None
) -> DeliveryEvent:
    event = DeliveryEvent(
        status=status,
        message=message,
        metadata_=metadata,
        created_at=created_at or datetime.utcnow()
    )
    order.events.append(event)
    return event


def list_orders(
    db: Session,
    user: User,
    status: Optional[DeliveryStatus] = None,
    page: int = 1,
    limit: int = 20
) -> Tuple[List[DeliveryOrder], int]:
    """Orders visible to the caller, newest first."""
    query = db.query(DeliveryOrder)

    if user.role == UserRole.ESTABLISHMENT:
        if user.establishment is None:
            return [], 0
        query = query.filter(DeliveryOrder.establishment_id == user.establishment.id)
    elif user.role == UserRole.MOTOBOY:
        if user.motoboy is None:
            return [], 0
        query = query.filter(
            DeliveryOrder.assignments.any(DeliveryAssignment.motoboy_id == user.motoboy.id)
        )

    if status:
        query = query.filter(DeliveryOrder.status == status)

    total = query.count()
    offset = (page - 1) * limit
    orders = query.order_by(DeliveryOrder.created_at.desc()).offset(offset).limit(limit).all()
    return orders, total


def resolve_establishment(db: Session, user: User, establishment_id: Optional[str]) -> EstablishmentProfile:
    if user.role == UserRole.ESTABLISHMENT:
        if user.establishment is None:
            raise AuthorizationError("Establishment profile not found for this user")
        return user.establishment

    if not establishment_id:
        raise AuthorizationError("An establishment is required to create an order")

    establishment = db.query(EstablishmentProfile).filter(
        EstablishmentProfile.id == establishment_id
    ).first()
    if not establishment:
        raise ResourceNotFoundError("Establishment", establishment_id)
    return establishment


def create_order(db: Session, user: User, data: OrderCreate) -> DeliveryOrder:
    establishment = resolve_establishment(db, user, data.establishment_id)

    fields = data.model_dump(exclude={"establishment_id"})
    if fields["delivery_fee"] is None and fields["distance_km"] is not None:
        fields["delivery_fee"] = establishment.fee_for_distance(fields["distance_km"])

    with transaction(db, "create order"):
        order = DeliveryOrder(
            establishment_id=establishment.id,
            delivery_code=unique_delivery_code(db),
            status=DeliveryStatus.PENDING,
            **fields
        )
        db.add(order)
        append_event(order, DeliveryStatus.PENDING, "Order created")

    logger.info(f"Order {order.id} ({order.delivery_code}) created by {user.email}")
    return order


def assign_motoboy(db: Session, order_id: str, user: User, motoboy_id: str) -> DeliveryAssignment:
    order = get_order_or_404(db, order_id)

    if user.role == UserRole.ESTABLISHMENT:
        if user.establishment is None or user.establishment.id != order.establishment_id:
            raise AuthorizationError("You cannot assign motoboys to this order")

    motoboy = db.query(MotoboyProfile).filter(MotoboyProfile.id == motoboy_id).first()
    if not motoboy:
        raise ResourceNotFoundError("Motoboy", motoboy_id)

    next_status = next_order_status(order.status, OrderAction.ASSIGN, user.role)

    active = order.active_assignment()
    if active is not None:
        raise ConflictError(
            "Order already has an active assignment",
            error_code="ASSIGNMENT_ACTIVE",
            details={"assignment_id": active.id, "assignment_status": active.status.value}
        )

    now = datetime.utcnow()
    with transaction(db, "assign motoboy"):
        assignment = DeliveryAssignment(
            motoboy_id=motoboy.id,
            status=AssignmentStatus.ASSIGNED,
            assigned_at=now
        )
        order.assignments.append(assignment)
        order.status = next_status
        append_event(order, next_status, f"Order assigned to motoboy {motoboy.full_name}", created_at=now)

    logger.info(f"Order {order.id} assigned to motoboy {motoboy.id} by {user.email}")
    return assignment


def respond_to_assignment(
    db: Session,
    order_id: str,
    user: User,
    target: AssignmentStatus,
    rejection_reason: Optional[str] = None
) -> DeliveryAssignment:
    """A courier accepts, rejects or completes its own assignment on an order."""
    assignment = None
    if user.motoboy is not None:
        assignment = db.query(DeliveryAssignment).filter(
            DeliveryAssignment.order_id == order_id,
            DeliveryAssignment.motoboy_id == user.motoboy.id
        ).order_by(DeliveryAssignment.assigned_at.desc()).first()

    # same answer whether the order is missing or belongs to another courier
    if assignment is None:
        raise ResourceNotFoundError("Assignment for this motoboy")

    order = assignment.order
    action = response_action(target)

    if target == AssignmentStatus.COMPLETED and assignment.status == AssignmentStatus.COMPLETED:
        logger.info(f"Assignment {assignment.id} already completed, nothing to do")
        return assignment

    next_status = next_order_status(order.status, action, user.role)
    next_assignment = next_assignment_status(assignment.status, action)

    now = datetime.utcnow()
    with transaction(db, "update assignment"):
        assignment.status = next_assignment

        if action == OrderAction.ACCEPT:
            assignment.accepted_at = now

        elif action == OrderAction.REJECT:
            assignment.rejection_reason = rejection_reason
            append_event(
                order,
                next_status,
                "Motoboy rejected the delivery",
                metadata={"rejection_reason": rejection_reason} if rejection_reason else None,
                created_at=now
            )

        elif action == OrderAction.COMPLETE:
            assignment.completed_at = now
            order.completed_at = now
            append_event(order, next_status, "Order marked as delivered by the motoboy", created_at=now)

        order.status = next_status

    logger.info(
        f"Assignment {assignment.id} on order {order.id} moved to {next_assignment.value} by {user.email}"
    )
    return assignment


def apply_status_change(
    order: DeliveryOrder,
    user: User,
    target: DeliveryStatus,
    message: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None
) -> Optional[DeliveryEvent]:
    """Move an order to ``target`` through the direct-update rules.

    Returns the appended event, or ``None`` when the order already has that status.
    The caller owns the transaction.
    """
    action = direct_status_action(user.role, target)

    if order.status == target:
        return None

    next_status = next_order_status(order.status, action, user.role)
    now = datetime.utcnow()

    if action in (OrderAction.START_TRANSIT, OrderAction.DELIVER):
        active = order.active_assignment()
        if active is None:
            raise ConflictError("Order has no active assignment", error_code="NO_ACTIVE_ASSIGNMENT")
        if user.role == UserRole.MOTOBOY and active.motoboy.user_id != user.id:
            raise AuthorizationError("Only the courier currently assigned can update this order")

        active.status = next_assignment_status(active.status, action)
        if action == OrderAction.START_TRANSIT and active.accepted_at is None:
            active.accepted_at = now
        if action == OrderAction.DELIVER:
            active.completed_at = now

    elif action == OrderAction.CANCEL:
        # frees the courier and the order's active-assignment slot
        active = order.active_assignment()
        if active is not None:
            active.status = next_assignment_status(active.status, action)
            active.rejection_reason = "Order cancelled"

    order.status = next_status
    if next_status == DeliveryStatus.DELIVERED:
        order.completed_at = now

    return append_event(
        order,
        next_status,
        message or f"Status updated to {next_status.value}",
        metadata=metadata,
        created_at=now
    )


def update_order(db: Session, order_id: str, user: User, data: OrderUpdate) -> DeliveryOrder:
    order = get_order_or_404(db, order_id)
    ensure_access(order, user)

    changes = data.model_dump(exclude_unset=True)
    target = changes.pop("status", None)

    if changes and user.role == UserRole.MOTOBOY:
        raise AuthorizationError("Motoboys can only update the order status")
    if changes and order.is_terminal:
        raise ConflictError(f"Orders in status {order.status.value} can no longer be edited")

    with transaction(db, "update order"):
        for field, value in changes.items():
            setattr(order, field, value)
        if target is not None:
            apply_status_change(order, user, target)

    logger.info(f"Order {order.id} updated by {user.email}")
    return order


def record_event(db: Session, order_id: str, user: User, data: StatusEventCreate) -> DeliveryEvent:
    """Append an event; a status other than the current one goes through the status rules."""
    order = get_order_or_404(db, order_id)
    ensure_access(order, user)

    with transaction(db, "record event"):
        if data.status == order.status:
            event = append_event(order, data.status, data.message, metadata=data.metadata)
        else:
            event = apply_status_change(order, user, data.status, data.message, data.metadata)

    logger.info(f"Event {data.status.value} recorded on order {order.id} by {user.email}")
    return event


def get_tracking(db: Session, code: str) -> DeliveryOrder:
    order = db.query(DeliveryOrder).filter(DeliveryOrder.delivery_code == code.upper()).first()
    if not order:
        raise ResourceNotFoundError("Delivery for this code")
    return order
