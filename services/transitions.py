"""
Status-transition authority for delivery orders and their assignments.

Every write that moves an order or an assignment asks this module first:

* ``ACTION_ROLES`` says which roles may perform an action at all,
* ``ORDER_TRANSITIONS`` maps ``(order status, action)`` to the next order status,
* ``ASSIGNMENT_TRANSITIONS`` maps ``(assignment status, action)`` to the next
  assignment status,
* ``DIRECT_STATUS_ACTIONS`` maps the statuses a role may request through a plain
  order update to the action they stand for.

A role outside the allow-list is an ``AuthorizationError``; a pair missing from a
table is a ``ConflictError``. Terminal order statuses have no rows.
"""
import enum
import logging
from typing import Dict, FrozenSet, Optional, Tuple

from core.exceptions import AuthorizationError, ConflictError
from models.delivery import AssignmentStatus, DeliveryStatus
from models.user import UserRole

logger = logging.getLogger(__name__)


class OrderAction(str, enum.Enum):
    ASSIGN = "ASSIGN"
    ACCEPT = "ACCEPT"
    REJECT = "REJECT"
    COMPLETE = "COMPLETE"
    START_TRANSIT = "START_TRANSIT"
    DELIVER = "DELIVER"
    CANCEL = "CANCEL"


ADMIN = UserRole.ADMIN
ESTABLISHMENT = UserRole.ESTABLISHMENT
MOTOBOY = UserRole.MOTOBOY

ACTION_ROLES: Dict[OrderAction, FrozenSet[UserRole]] = {
    OrderAction.ASSIGN: frozenset({ADMIN, ESTABLISHMENT}),
    OrderAction.ACCEPT: frozenset({MOTOBOY}),
    OrderAction.REJECT: frozenset({MOTOBOY}),
    OrderAction.COMPLETE: frozenset({MOTOBOY}),
    OrderAction.START_TRANSIT: frozenset({ADMIN, ESTABLISHMENT, MOTOBOY}),
    OrderAction.DELIVER: frozenset({ADMIN, ESTABLISHMENT, MOTOBOY}),
    OrderAction.CANCEL: frozenset({ADMIN, ESTABLISHMENT}),
}

S = DeliveryStatus

ORDER_TRANSITIONS: Dict[Tuple[DeliveryStatus, OrderAction], DeliveryStatus] = {
    (S.PENDING, OrderAction.ASSIGN): S.ASSIGNED,
    # re-assignment once the previous courier rejected
    (S.ASSIGNED, OrderAction.ASSIGN): S.ASSIGNED,

    (S.ASSIGNED, OrderAction.ACCEPT): S.ASSIGNED,
    (S.ASSIGNED, OrderAction.REJECT): S.ASSIGNED,

    (S.ASSIGNED, OrderAction.COMPLETE): S.DELIVERED,
    (S.IN_TRANSIT, OrderAction.COMPLETE): S.DELIVERED,

    (S.ASSIGNED, OrderAction.START_TRANSIT): S.IN_TRANSIT,

    (S.ASSIGNED, OrderAction.DELIVER): S.DELIVERED,
    (S.IN_TRANSIT, OrderAction.DELIVER): S.DELIVERED,

    (S.PENDING, OrderAction.CANCEL): S.CANCELLED,
    (S.ASSIGNED, OrderAction.CANCEL): S.CANCELLED,
    (S.IN_TRANSIT, OrderAction.CANCEL): S.CANCELLED,
}

A = AssignmentStatus

ASSIGNMENT_TRANSITIONS: Dict[Tuple[AssignmentStatus, OrderAction], AssignmentStatus] = {
    (A.ASSIGNED, OrderAction.ACCEPT): A.ACCEPTED,

    (A.ASSIGNED, OrderAction.REJECT): A.REJECTED,
    (A.ACCEPTED, OrderAction.REJECT): A.REJECTED,

    (A.ASSIGNED, OrderAction.START_TRANSIT): A.IN_TRANSIT,
    (A.ACCEPTED, OrderAction.START_TRANSIT): A.IN_TRANSIT,

    (A.ACCEPTED, OrderAction.COMPLETE): A.COMPLETED,
    (A.IN_TRANSIT, OrderAction.COMPLETE): A.COMPLETED,

    # an unaccepted assignment cannot be delivered, as with COMPLETE
    (A.ACCEPTED, OrderAction.DELIVER): A.COMPLETED,
    (A.IN_TRANSIT, OrderAction.DELIVER): A.COMPLETED,

    # cancelling the order releases whoever holds it
    (A.ASSIGNED, OrderAction.CANCEL): A.REJECTED,
    (A.ACCEPTED, OrderAction.CANCEL): A.REJECTED,
    (A.IN_TRANSIT, OrderAction.CANCEL): A.REJECTED,
}

# Target statuses each role may request through a direct order update
DIRECT_STATUS_ACTIONS: Dict[UserRole, Dict[DeliveryStatus, OrderAction]] = {
    ADMIN: {
        S.IN_TRANSIT: OrderAction.START_TRANSIT,
        S.DELIVERED: OrderAction.DELIVER,
        S.CANCELLED: OrderAction.CANCEL,
    },
    ESTABLISHMENT: {
        S.IN_TRANSIT: OrderAction.START_TRANSIT,
        S.DELIVERED: OrderAction.DELIVER,
        S.CANCELLED: OrderAction.CANCEL,
    },
    MOTOBOY: {
        S.IN_TRANSIT: OrderAction.START_TRANSIT,
        S.DELIVERED: OrderAction.DELIVER,
    },
}

# Assignment response status -> action
RESPONSE_ACTIONS: Dict[AssignmentStatus, OrderAction] = {
    A.ACCEPTED: OrderAction.ACCEPT,
    A.REJECTED: OrderAction.REJECT,
    A.COMPLETED: OrderAction.COMPLETE,
}


def ensure_role(action: OrderAction, role: UserRole) -> None:
    if role not in ACTION_ROLES.get(action, frozenset()):
        logger.warning(f"Role {role.value} may not perform {action.value}")
        raise AuthorizationError(f"Role {role.value} may not perform {action.value.lower()}")


def next_order_status(current: DeliveryStatus, action: OrderAction, role: UserRole) -> DeliveryStatus:
    """Evaluate ``(current, action, role)`` against the order table."""
    ensure_role(action, role)

    next_status = ORDER_TRANSITIONS.get((current, action))
    if next_status is None:
        logger.warning(f"Rejected order transition {current.value} --{action.value}-->")
        raise ConflictError(
            f"Cannot {action.value.lower()} an order in status {current.value}",
            error_code="INVALID_TRANSITION",
            details={"status": current.value, "action": action.value}
        )
    return next_status


def next_assignment_status(current: AssignmentStatus, action: OrderAction) -> AssignmentStatus:
    """Evaluate ``(current, action)`` against the assignment table."""
    next_status = ASSIGNMENT_TRANSITIONS.get((current, action))
    if next_status is None:
        logger.warning(f"Rejected assignment transition {current.value} --{action.value}-->")
        raise ConflictError(
            f"Cannot {action.value.lower()} an assignment in status {current.value}",
            error_code="INVALID_TRANSITION",
            details={"assignment_status": current.value, "action": action.value}
        )
    return next_status


def direct_status_action(role: UserRole, target: DeliveryStatus) -> OrderAction:
    """Action behind a status requested through a direct order update."""
    action: Optional[OrderAction] = DIRECT_STATUS_ACTIONS.get(role, {}).get(target)
    if action is None:
        allowed = sorted(s.value for s in DIRECT_STATUS_ACTIONS.get(role, {}))
        raise AuthorizationError(
            f"Role {role.value} may only set status to: {', '.join(allowed)}",
            details={"allowed_statuses": allowed}
        )
    return action


def response_action(target: AssignmentStatus) -> OrderAction:
    action = RESPONSE_ACTIONS.get(target)
    if action is None:
        raise ConflictError(f"Assignments cannot be moved to {target.value} by a response")
    return action
