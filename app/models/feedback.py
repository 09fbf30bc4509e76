"""Guest feedback model"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, DateTime, Text, Uuid, ForeignKey

from app.database import Base


class Feedback(Base):
    """Post-visit rating, one per reservation"""
    __tablename__ = "feedback"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    reservation_id = Column(
        Uuid, ForeignKey("reservations.id", ondelete="CASCADE"), unique=True, nullable=False
    )

    rating = Column(Integer, nullable=False)  # 1-5
    comment = Column(Text)

    # As entered by the guest, may differ from the booking
    customer_name = Column(String(255))
    customer_phone = Column(String(20))

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
