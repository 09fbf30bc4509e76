"""Reservation model"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, Date, DateTime, Text, Uuid

from app.database import Base


class Reservation(Base):
    """Table reservations"""
    __tablename__ = "reservations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    booking_code = Column(String(16), unique=True, nullable=False)

    # Guest information
    guest_name = Column(String(255), nullable=False)
    guest_phone = Column(String(20), nullable=False, index=True)
    guest_email = Column(String(255))

    # Reservation details
    party_size = Column(Integer, nullable=False)
    reservation_date = Column(Date, nullable=False, index=True)
    reservation_time = Column(String(8), nullable=False)  # HH:MM
    table_number = Column(Integer)  # DiningTable.id, not enforced

    # Status
    status = Column(String(20), default="pending")  # pending, confirmed, cancelled, completed

    # Notes
    special_requests = Column(Text)
    admin_notes = Column(Text)
    payment_slip_url = Column(String(500))

    # Metadata
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
