"""Database models"""

from app.models.reservation import Reservation
from app.models.table import DiningTable
from app.models.setting import Setting, Holiday
from app.models.audit import AuditLog
from app.models.feedback import Feedback
from app.models.user import User, UserRole

__all__ = [
    "Reservation",
    "DiningTable",
    "Setting",
    "Holiday",
    "AuditLog",
    "Feedback",
    "User",
    "UserRole",
]
