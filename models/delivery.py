import uuid
from datetime import datetime
from sqlalchemy import (
    Column, String, DateTime, ForeignKey, Text, Float, Integer, Enum, JSON, Index, text
)
from sqlalchemy.orm import relationship
from database.base import Base
import enum

class DeliveryStatus(str, enum.Enum):
    PENDING = "PENDING"
    ASSIGNED = "ASSIGNED"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"

class AssignmentStatus(str, enum.Enum):
    ASSIGNED = "ASSIGNED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    IN_TRANSIT = "IN_TRANSIT"
    COMPLETED = "COMPLETED"

TERMINAL_DELIVERY_STATUSES = frozenset({DeliveryStatus.DELIVERED, DeliveryStatus.CANCELLED})

# An order has at most one assignment in one of these statuses
ACTIVE_ASSIGNMENT_STATUSES = frozenset({
    AssignmentStatus.ASSIGNED,
    AssignmentStatus.ACCEPTED,
    AssignmentStatus.IN_TRANSIT,
})

_ACTIVE_ASSIGNMENT_CLAUSE = text("status IN ('ASSIGNED', 'ACCEPTED', 'IN_TRANSIT')")

class DeliveryOrder(Base):
    __tablename__ = "delivery_orders"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    delivery_code = Column(String(16), unique=True, nullable=False, index=True)
    establishment_id = Column(String, ForeignKey("establishment_profiles.id"), nullable=False, index=True)
    customer_name = Column(String, nullable=False)
    customer_phone = Column(String, nullable=True)
    pickup_address = Column(String, nullable=False)
    delivery_address = Column(String, nullable=False)
    notes = Column(Text, nullable=True)
    distance_km = Column(Float, nullable=True)
    delivery_fee = Column(Float, nullable=True)
    scheduled_at = Column(DateTime, nullable=True)
    status = Column(Enum(DeliveryStatus), default=DeliveryStatus.PENDING, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    completed_at = Column(DateTime, nullable=True)

    # Relationships
    establishment = relationship("EstablishmentProfile", back_populates="orders")
    assignments = relationship(
        "DeliveryAssignment",
        back_populates="order",
        order_by="DeliveryAssignment.assigned_at"
    )
    events = relationship(
        "DeliveryEvent",
        back_populates="order",
        order_by="DeliveryEvent.id"
    )
    reviews = relationship("Review", back_populates="order")

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_DELIVERY_STATUSES

    def active_assignment(self):
        for assignment in self.assignments:
            if assignment.status in ACTIVE_ASSIGNMENT_STATUSES:
                return assignment
        return None

    def __repr__(self):
        return f"<DeliveryOrder(id={self.id}, code={self.delivery_code}, status={self.status})>"

class DeliveryAssignment(Base):
    __tablename__ = "delivery_assignments"
    __table_args__ = (
        Index(
            "uq_delivery_assignments_active_order",
            "order_id",
            unique=True,
            sqlite_where=_ACTIVE_ASSIGNMENT_CLAUSE,
            postgresql_where=_ACTIVE_ASSIGNMENT_CLAUSE,
        ),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    order_id = Column(String, ForeignKey("delivery_orders.id"), nullable=False, index=True)
    motoboy_id = Column(String, ForeignKey("motoboy_profiles.id"), nullable=False, index=True)
    status = Column(Enum(AssignmentStatus), default=AssignmentStatus.ASSIGNED, nullable=False)
    assigned_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    accepted_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    rejection_reason = Column(Text, nullable=True)

    # Relationships
    order = relationship("DeliveryOrder", back_populates="assignments")
    motoboy = relationship("MotoboyProfile", back_populates="assignments")

    def __repr__(self):
        return f"<DeliveryAssignment(id={self.id}, order_id={self.order_id}, status={self.status})>"

class DeliveryEvent(Base):
    """Append-only status trail of an order. Rows are never updated."""
    __tablename__ = "delivery_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String, ForeignKey("delivery_orders.id"), nullable=False, index=True)
    status = Column(Enum(DeliveryStatus), nullable=False)
    message = Column(Text, nullable=True)
    metadata_ = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Relationships
    order = relationship("DeliveryOrder", back_populates="events")

    def __repr__(self):
        return f"<DeliveryEvent(order_id={self.order_id}, status={self.status})>"
