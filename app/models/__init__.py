from app.models.checkin import CheckIn, CheckInStatus, EmergencyContact, EmergencyReason
from app.models.notification import SafetyNotification
from app.models.record import CheckInRecord
from app.models.shared_session import SharedSession

__all__ = [
    "CheckIn",
    "CheckInStatus",
    "EmergencyContact",
    "EmergencyReason",
    "CheckInRecord",
    "SafetyNotification",
    "SharedSession",
]
