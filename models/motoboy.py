import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Float, JSON
from sqlalchemy.orm import relationship
from database.base import Base

class MotoboyProfile(Base):
    __tablename__ = "motoboy_profiles"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, unique=True)
    full_name = Column(String, nullable=False)
    cpf = Column(String(14), nullable=False)
    cnh_number = Column(String, nullable=False)
    cnh_category = Column(String, nullable=False)
    vehicle_type = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    work_schedule = Column(JSON, nullable=True)
    verified_at = Column(DateTime, nullable=True)
    hired_at = Column(DateTime, nullable=True)

    # Live state, overwritten on every location report
    is_available = Column(Boolean, default=False, nullable=False)
    current_lat = Column(Float, nullable=True)
    current_lng = Column(Float, nullable=True)
    location_updated_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    user = relationship("User", back_populates="motoboy")
    assignments = relationship("DeliveryAssignment", back_populates="motoboy")

    @property
    def has_location(self) -> bool:
        return self.current_lat is not None and self.current_lng is not None

    def __repr__(self):
        return f"<MotoboyProfile(id={self.id}, full_name={self.full_name}, available={self.is_available})>"
