from .user import User, UserRole
from .establishment import EstablishmentProfile, EstablishmentPlan
from .motoboy import MotoboyProfile
from .delivery import (
    DeliveryOrder,
    DeliveryAssignment,
    DeliveryEvent,
    DeliveryStatus,
    AssignmentStatus,
)
from .review import Review

__all__ = [
    "User",
    "UserRole",
    "EstablishmentProfile",
    "EstablishmentPlan",
    "MotoboyProfile",
    "DeliveryOrder",
    "DeliveryAssignment",
    "DeliveryEvent",
    "DeliveryStatus",
    "AssignmentStatus",
    "Review",
]
