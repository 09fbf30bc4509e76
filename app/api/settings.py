"""Restaurant settings endpoints"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.booking.feed import Action, ChangeEvent, ChangeFeed, Entity
from app.booking.overlap import TimeFormatError, parse_time
from app.database import get_db
from app.dependencies import get_change_feed
from app.errors import ValidationFailed
from app.models.setting import Setting
from app.models.user import User, UserRole
from app.schemas.setting import SettingUpsert, SettingResponse
from app.api.auth import get_optional_user, require_role

router = APIRouter()

PUBLIC_KEYS = {"business_hours"}


def validate_business_hours(value) -> None:
    """Weekday keys "0".."6" mapping to {"open": "HH:MM", "close": "HH:MM"}"""
    if not isinstance(value, dict):
        raise ValidationFailed("business_hours must be an object keyed by weekday")

    for day, hours in value.items():
        if day not in {str(i) for i in range(7)}:
            raise ValidationFailed(f"Invalid weekday key: {day}")
        if hours is None:
            continue
        try:
            opening = parse_time(hours["open"])
            closing = parse_time(hours["close"])
        except (KeyError, TypeError, TimeFormatError):
            raise ValidationFailed(f"Invalid opening hours for weekday {day}")
        if closing <= opening:
            raise ValidationFailed(f"Closing time must be after opening time for weekday {day}")


@router.get("")
async def get_settings(
    key: Optional[str] = None,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    """Fetch one setting by key, or all of them (staff only)"""
    if current_user is None and key not in PUBLIC_KEYS:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    query = select(Setting)
    if key:
        query = query.where(Setting.key == key)

    result = await db.execute(query)
    rows = [SettingResponse.model_validate(s) for s in result.scalars().all()]

    if key:
        return {"data": rows[0] if rows else None}
    return {"data": rows}


@router.post("")
async def upsert_setting(
    setting_data: SettingUpsert,
    current_user: User = Depends(require_role(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
    feed: ChangeFeed = Depends(get_change_feed),
):
    """Create or replace a setting"""
    if setting_data.key == "business_hours":
        validate_business_hours(setting_data.value)

    result = await db.execute(select(Setting).where(Setting.key == setting_data.key))
    setting = result.scalar_one_or_none()
    action = Action.UPDATE

    if setting is None:
        setting = Setting(key=setting_data.key)
        db.add(setting)
        action = Action.INSERT

    setting.value = setting_data.value
    setting.description = setting_data.description
    setting.updated_at = datetime.utcnow()

    await db.commit()
    await db.refresh(setting)

    await feed.publish(ChangeEvent(Entity.SETTINGS, action, setting.key))
    return {"data": SettingResponse.model_validate(setting)}
