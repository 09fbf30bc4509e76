"""Audit trail writes"""

from typing import Optional

import structlog
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.audit import AuditLog
from app.models.user import User

logger = structlog.get_logger()


def client_ip(request: Request) -> str:
    """Caller address, honouring proxy headers"""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip

    return request.client.host if request.client else "unknown"


async def record_audit(
    db: AsyncSession,
    request: Request,
    user: User,
    action: str,
    entity: str,
    entity_id: Optional[str] = None,
    payload: Optional[dict] = None,
) -> None:
    """Add an audit row to the current transaction"""
    db.add(
        AuditLog(
            user_id=user.id,
            actor_name=user.full_name or user.email,
            action=action,
            entity=entity,
            entity_id=entity_id,
            payload=payload,
            ip_address=client_ip(request),
        )
    )
    logger.info("Audit", action=action, entity=entity, entity_id=entity_id, user_id=str(user.id))
