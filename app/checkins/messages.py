"""Format messages sent to emergency contacts."""
from datetime import datetime

from app.models import CheckIn, EmergencyReason, SharedSession


def format_session_time(value: datetime) -> str:
    """Format a timestamp the way it appears in contact messages.

    Example: "Oct 18, 2026 at 7:30 PM UTC"
    """
    hour = value.strftime("%I").lstrip("0")
    zone = value.tzname() or "UTC"
    return f"{value.strftime('%b')} {value.day}, {value.year} at {hour}:{value.strftime('%M %p')} {zone}"


def started_message(check_in: CheckIn) -> str:
    return f"Jam session check-in started with {check_in.counterpart_name}"


def completed_message(check_in: CheckIn) -> str:
    return "Jam session check-in completed successfully"


def overdue_message(check_in: CheckIn) -> str:
    return f"Jam session check-in overdue for session with {check_in.counterpart_name}"


def reminder_message(check_in: CheckIn) -> str:
    return (
        f"Reminder: jam session with {check_in.counterpart_name} at "
        f"{check_in.location} on {format_session_time(check_in.scheduled_time)}. "
        f"Check in by {format_session_time(check_in.check_in_deadline)}."
    )


def session_update_message(check_in: CheckIn, update: str) -> str:
    """
    Wrap a short status update into the full text a contact receives.

    The body names the counterpart and location so the contact has
    context without opening the app.
    """
    return "\n".join([
        "Safety Alert from MusicJam:",
        update,
        "",
        f"Session: {format_session_time(check_in.scheduled_time)}",
        f"With: {check_in.counterpart_name}",
        f"Location: {check_in.location}",
        "",
        "This is an automated safety notification.",
    ])


def emergency_message(check_in: CheckIn) -> str:
    """
    Build the emergency alert body.

    Includes everything a contact needs to act: who the musician was
    meeting, where, when the session started and when they should have
    checked in. The opening line depends on whether the musician raised
    the alert themselves or missed their check-in deadline.
    """
    if check_in.emergency_reason == EmergencyReason.MISSED_CHECK_IN:
        summary = "A musician you are a safety contact for has not checked in from a jam session."
    else:
        summary = "A musician you are a safety contact for has raised an emergency alert during a jam session."

    return "\n".join([
        "EMERGENCY from MusicJam:",
        summary,
        "",
        f"With: {check_in.counterpart_name} (user {check_in.counterpart_id})",
        f"Location: {check_in.location}",
        f"Session: {format_session_time(check_in.scheduled_time)}",
        f"Expected check-in: {format_session_time(check_in.check_in_deadline)}",
        "",
        "Please try to reach them. If you cannot, contact local emergency services.",
    ])


def share_message(shared: SharedSession) -> str:
    """Body sent to each contact a session was shared with."""
    return "\n".join([
        "Safety Alert from MusicJam:",
        f"{shared.shared_by or 'A musician'} has shared their jam session details with you.",
        "",
        f"Session: {format_session_time(shared.session_time)}",
        f"With: {shared.counterpart_name}",
        f"Location: {shared.location}",
        "",
        "This is an automated safety notification.",
    ])
