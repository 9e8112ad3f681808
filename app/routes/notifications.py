"""Outbox routes for inspecting queued safety notifications."""
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlmodel import Session, select

from app.core.database import get_session
from app.models import SafetyNotification

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("")
async def list_notifications(
    check_in_id: UUID | None = None,
    session: Session = Depends(get_session),
):
    """
    List queued safety notifications, newest first.

    Optionally filtered to a single check-in.
    """
    statement = select(SafetyNotification).order_by(SafetyNotification.created_at.desc())
    if check_in_id:
        statement = statement.where(SafetyNotification.check_in_id == check_in_id)
    return session.exec(statement).all()
