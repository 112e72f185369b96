import uuid
from datetime import datetime
from typing import Any, Dict, Optional
from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship, Session
from database.base import Base

class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("order_id", "author_id", name="uq_reviews_order_author"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    order_id = Column(String, ForeignKey("delivery_orders.id"), nullable=False, index=True)
    author_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    target_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    rating = Column(Integer, nullable=False)  # 1-5 stars
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    order = relationship("DeliveryOrder", back_populates="reviews")
    author = relationship("User", back_populates="reviews_written", foreign_keys=[author_id])
    target = relationship("User", back_populates="reviews_received", foreign_keys=[target_id])

    def __repr__(self):
        return f"<Review(id={self.id}, order_id={self.order_id}, rating={self.rating})>"

    @classmethod
    def rating_summary(cls, db: Session, *criteria) -> Dict[str, Any]:
        """Average rating and count over the reviews matching ``criteria``"""
        query = db.query(
            func.avg(cls.rating).label('average'),
            func.count(cls.id).label('total')
        )
        if criteria:
            query = query.filter(*criteria)
        result = query.first()

        average: Optional[float] = None
        if result is not None and result.average is not None:
            average = round(float(result.average), 2)

        return {
            'average_rating': average,
            'rating_count': (result.total if result is not None else 0) or 0
        }
