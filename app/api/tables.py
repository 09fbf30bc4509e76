"""Dining table (floor plan) endpoints"""

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.booking.feed import Action, ChangeEvent, ChangeFeed, Entity
from app.database import get_db
from app.dependencies import get_change_feed
from app.errors import NotFound
from app.models.table import DiningTable
from app.models.user import User
from app.schemas.table import TableCreate, TableUpdate, TableResponse
from app.api.auth import get_current_active_user

router = APIRouter()


async def _get_or_404(db: AsyncSession, table_id: int) -> DiningTable:
    result = await db.execute(select(DiningTable).where(DiningTable.id == table_id))
    table = result.scalar_one_or_none()
    if not table:
        raise NotFound("Table not found")
    return table


@router.get("")
async def list_tables(db: AsyncSession = Depends(get_db)):
    """All tables ordered by id"""
    result = await db.execute(select(DiningTable).order_by(DiningTable.id.asc()))
    return {"data": [TableResponse.model_validate(t) for t in result.scalars().all()]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_table(
    table_data: TableCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    """Add a table to the floor plan"""
    table = DiningTable(**table_data.model_dump())
    db.add(table)
    await db.commit()
    await db.refresh(table)

    await feed.publish(ChangeEvent(Entity.TABLES, Action.INSERT, str(table.id)))
    return {"data": TableResponse.model_validate(table)}


@router.put("/{table_id}")
async def update_table(
    table_id: int,
    table_data: TableUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    """Edit a table, including its position on the floor plan"""
    table = await _get_or_404(db, table_id)

    for field, value in table_data.model_dump(exclude_unset=True).items():
        setattr(table, field, value)

    await db.commit()
    await db.refresh(table)

    await feed.publish(ChangeEvent(Entity.TABLES, Action.UPDATE, str(table.id)))
    return {"data": TableResponse.model_validate(table)}


@router.delete("/{table_id}")
async def delete_table(
    table_id: int,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    """Remove a table; reservations keep their table number"""
    table = await _get_or_404(db, table_id)
    await db.delete(table)
    await db.commit()

    await feed.publish(ChangeEvent(Entity.TABLES, Action.DELETE, str(table_id)))
    return {"success": True}
