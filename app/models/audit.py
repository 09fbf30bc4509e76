"""Audit log model"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, JSON, Uuid

from app.database import Base


class AuditLog(Base):
    """Audit trail for admin actions"""
    __tablename__ = "audit_logs"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Actor information
    user_id = Column(Uuid)  # null for system
    actor_name = Column(String(255))

    # Action details
    action = Column(String(100), nullable=False)  # create_holiday, delete_reservation, etc.
    entity = Column(String(50))  # reservations, holidays, tables
    entity_id = Column(String(64))

    payload = Column(JSON)

    # Request context
    ip_address = Column(String(50))

    created_at = Column(DateTime, default=datetime.utcnow)
