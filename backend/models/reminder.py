from pydantic import BaseModel
from typing import Optional, Tuple


class ReminderMarker(BaseModel):
    """Proof that a medication reminder went out for one dose on one day."""
    schedule_id: str
    dose_time: str  # as stored on the schedule, e.g. "08:00" or "8:00 PM"
    date_key: str   # YYYY-MM-DD, clinic-local
    patient_id: str
    sent_at: Optional[str] = None

    @property
    def key(self) -> Tuple[str, str, str]:
        return (self.schedule_id, self.dose_time, self.date_key)

    @property
    def field_name(self) -> str:
        """Legacy per-profile field identity, used in logs"""
        return f"lastReminder_{self.schedule_id}_{self.dose_time}_{self.date_key}"

    def to_dict(self):
        return {
            "schedule_id": self.schedule_id,
            "dose_time": self.dose_time,
            "date_key": self.date_key,
            "patient_id": self.patient_id,
            "sent_at": self.sent_at or "",
        }


class ChannelResult(BaseModel):
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self):
        return {
            "success": self.success,
            "message_id": self.message_id,
            "error": self.error,
        }


class DispatchResult(ChannelResult):
    error_kind: Optional[str] = None  # exception class name from backend.exceptions

    @classmethod
    def failure(cls, error: Exception) -> "DispatchResult":
        return cls(success=False, error=str(error), error_kind=type(error).__name__)

    def to_dict(self):
        data = super().to_dict()
        data["error_kind"] = self.error_kind
        return data
