import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Text, Float, Integer, Enum
from sqlalchemy.orm import relationship
from database.base import Base
import enum

class EstablishmentPlan(str, enum.Enum):
    BASIC = "BASIC"
    PRO = "PRO"
    ENTERPRISE = "ENTERPRISE"

class EstablishmentProfile(Base):
    __tablename__ = "establishment_profiles"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, unique=True)
    name = Column(String, nullable=False)
    cnpj = Column(String(18), nullable=False)
    contact_email = Column(String, nullable=False)
    contact_phone = Column(String, nullable=True)
    address_line1 = Column(String, nullable=False)
    address_line2 = Column(String, nullable=True)
    city = Column(String, nullable=False)
    state = Column(String(2), nullable=False)
    postal_code = Column(String, nullable=False)

    # Delivery fee policy
    delivery_radius_km = Column(Float, default=5.0, nullable=False)
    base_delivery_fee = Column(Float, default=0.0, nullable=False)
    additional_per_km = Column(Float, default=0.0, nullable=False)
    estimated_delivery_time_minutes = Column(Integer, default=30, nullable=False)

    plan = Column(Enum(EstablishmentPlan), default=EstablishmentPlan.BASIC, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="establishment")
    orders = relationship("DeliveryOrder", back_populates="establishment")

    def fee_for_distance(self, distance_km: float) -> float:
        """Delivery fee charged by this establishment for a given distance"""
        return round((self.base_delivery_fee or 0.0) + (self.additional_per_km or 0.0) * distance_km, 2)

    def __repr__(self):
        return f"<EstablishmentProfile(id={self.id}, name={self.name})>"
