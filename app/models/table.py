"""Dining table model"""

from sqlalchemy import Column, String, Integer, Float, Boolean, Text

from app.database import Base


class DiningTable(Base):
    """A table on the floor plan"""
    __tablename__ = "tables"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    description = Column(Text)
    capacity = Column(Integer, nullable=False, default=2)

    # Floor plan
    shape = Column(String(20), default="rectangle")  # rectangle, circle, square
    zone = Column(String(50))  # indoor, outdoor, vip
    position_x = Column(Float, default=0)
    position_y = Column(Float, default=0)
    width = Column(Float, default=80)
    height = Column(Float, default=80)

    is_active = Column(Boolean, default=True)
