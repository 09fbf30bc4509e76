"""Dining table schemas"""

from typing import Optional, Literal
from pydantic import BaseModel, Field

TableShape = Literal["rectangle", "circle", "square"]


class TableCreate(BaseModel):
    """Create table request"""
    name: str
    description: Optional[str] = None
    capacity: int = Field(2, ge=1)
    shape: TableShape = "rectangle"
    zone: Optional[str] = None
    position_x: float = 0
    position_y: float = 0
    width: float = 80
    height: float = 80
    is_active: bool = True


class TableUpdate(BaseModel):
    """Update table request"""
    name: Optional[str] = None
    description: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=1)
    shape: Optional[TableShape] = None
    zone: Optional[str] = None
    position_x: Optional[float] = None
    position_y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    is_active: Optional[bool] = None


class TableResponse(BaseModel):
    """Table response"""
    id: int
    name: str
    description: Optional[str]
    capacity: int
    shape: Optional[str]
    zone: Optional[str]
    position_x: Optional[float]
    position_y: Optional[float]
    width: Optional[float]
    height: Optional[float]
    is_active: bool

    class Config:
        from_attributes = True
