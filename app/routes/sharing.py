"""Routes for sharing jam session details with contacts."""
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlmodel import Field, SQLModel

from app.checkins.errors import ValidationError
from app.checkins.sharing import SessionSharer
from app.models import EmergencyContact, SharedSession

router = APIRouter(prefix="/shares", tags=["shares"])


class ShareSession(SQLModel):
    """Request body for sharing session details."""
    counterpart_id: str
    counterpart_name: str
    session_time: datetime
    location: str
    notes: str = ""
    shared_by: str = ""
    contacts: list[EmergencyContact] = Field(default_factory=list)


def get_sharer(request: Request) -> SessionSharer:
    """Dependency returning the application's SessionSharer."""
    return request.app.state.sharer


@router.post("", status_code=201, response_model=SharedSession)
async def share_session(body: ShareSession, sharer: SessionSharer = Depends(get_sharer)):
    """
    Share session details with the selected contacts.

    Contacts that opted out of session alerts are skipped. Returns 422 if
    the location is empty or no selected contact accepts session alerts.
    """
    try:
        return await sharer.share(
            counterpart_id=body.counterpart_id,
            counterpart_name=body.counterpart_name,
            session_time=body.session_time,
            location=body.location,
            contacts=body.contacts,
            notes=body.notes,
            shared_by=body.shared_by,
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("", response_model=list[SharedSession])
async def list_shared_sessions(sharer: SessionSharer = Depends(get_sharer)):
    """List shared sessions, most recent first."""
    return sharer.list_shared()
