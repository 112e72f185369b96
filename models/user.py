import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Enum
from sqlalchemy.orm import relationship
from database.base import Base
import enum

class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    ESTABLISHMENT = "ESTABLISHMENT"
    MOTOBOY = "MOTOBOY"

class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(Enum(UserRole), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login = Column(DateTime, nullable=True)

    # Relationships
    establishment = relationship("EstablishmentProfile", uselist=False, back_populates="user")
    motoboy = relationship("MotoboyProfile", uselist=False, back_populates="user")
    reviews_written = relationship("Review", back_populates="author", foreign_keys="Review.author_id")
    reviews_received = relationship("Review", back_populates="target", foreign_keys="Review.target_id")

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
