"""Check-in routes for scheduling and driving jam session check-ins."""
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlmodel import Field, SQLModel

from app.checkins.errors import NotFoundError, ValidationError
from app.checkins.manager import CheckInManager
from app.models import CheckIn, EmergencyContact

router = APIRouter(prefix="/checkins", tags=["checkins"])


class ScheduleCheckIn(SQLModel):
    """Request body for scheduling a check-in."""
    counterpart_id: str
    counterpart_name: str
    location: str
    scheduled_time: datetime
    check_in_deadline: datetime
    contacts: list[EmergencyContact] = Field(default_factory=list)


def get_manager(request: Request) -> CheckInManager:
    """Dependency returning the application's CheckInManager."""
    return request.app.state.manager


@router.post("", status_code=201, response_model=CheckIn)
async def schedule_check_in(
    body: ScheduleCheckIn,
    manager: CheckInManager = Depends(get_manager),
):
    """
    Schedule a check-in for an upcoming jam session.

    Returns 422 if the session time is not in the future or the check-in
    deadline is not after the session time.
    """
    try:
        return await manager.schedule(
            counterpart_id=body.counterpart_id,
            counterpart_name=body.counterpart_name,
            location=body.location,
            scheduled_time=body.scheduled_time,
            check_in_deadline=body.check_in_deadline,
            contacts=body.contacts,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("")
async def list_check_ins(manager: CheckInManager = Depends(get_manager)):
    """
    List all check-ins grouped by collection.

    Historical check-ins are ordered most recent first. Escalated
    (emergency) check-ins appear under active.
    """
    return {
        "has_active_check_in": manager.has_active_check_in,
        "scheduled": manager.scheduled,
        "active": manager.active,
        "historical": manager.historical,
    }


@router.get("/{check_in_id}", response_model=CheckIn)
async def get_check_in(check_in_id: UUID, manager: CheckInManager = Depends(get_manager)):
    """Get a single check-in from any collection."""
    try:
        return manager.get(check_in_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Check-in not found")


@router.post("/{check_in_id}/start", response_model=CheckIn)
async def start_check_in(check_in_id: UUID, manager: CheckInManager = Depends(get_manager)):
    """Start a scheduled check-in. Returns 404 unless it is scheduled."""
    try:
        return await manager.start(check_in_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Scheduled check-in not found")


@router.post("/{check_in_id}/complete", response_model=CheckIn)
async def complete_check_in(check_in_id: UUID, manager: CheckInManager = Depends(get_manager)):
    """Check in safe. Returns 404 unless the check-in is active."""
    try:
        return await manager.complete(check_in_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Active check-in not found")


@router.post("/{check_in_id}/cancel", response_model=CheckIn)
async def cancel_check_in(check_in_id: UUID, manager: CheckInManager = Depends(get_manager)):
    """Cancel a scheduled or active check-in."""
    try:
        return await manager.cancel(check_in_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Check-in not found")


@router.post("/{check_in_id}/emergency", response_model=CheckIn)
async def trigger_emergency(check_in_id: UUID, manager: CheckInManager = Depends(get_manager)):
    """
    Trigger an emergency alert for an active check-in.

    Every emergency contact is alerted with the session location and
    counterpart details, whether or not they opted in to routine updates.
    """
    try:
        return await manager.trigger_emergency(check_in_id)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Active check-in not found")
