from enum import Enum
from datetime import datetime
from typing import Optional, Dict, Any
from pydantic import BaseModel, validator

from ..utils.date_utils import parse_instant


class AppointmentType(str, Enum):
    CONSULTATION = "consultation"
    FOLLOW_UP = "follow-up"
    EXAMINATION = "examination"
    MEDICATION_REVIEW = "medication-review"
    RISK_ASSESSMENT = "risk-assessment"
    OTHER = "other"


class AppointmentStatus(str, Enum):
    UPCOMING = "upcoming"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Appointment(BaseModel):
    appointment_id: str
    patient_id: str
    doctor_id: Optional[str] = None
    scheduled_at: datetime
    type: AppointmentType = AppointmentType.OTHER
    reminder_enabled: bool = False
    reminder_sent_24h: bool = False
    reminder_sent_1h: bool = False
    status: AppointmentStatus = AppointmentStatus.UPCOMING
    reminder_sent_24h_at: Optional[str] = None
    reminder_sent_1h_at: Optional[str] = None

    @validator('appointment_id', 'patient_id', pre=True)
    def validate_required_id(cls, v):
        if v is None or not str(v).strip():
            raise ValueError('id must not be empty')
        return str(v).strip()

    @validator('doctor_id', pre=True)
    def validate_doctor_id(cls, v):
        if v is None or not str(v).strip():
            return None
        return str(v).strip()

    @validator('scheduled_at', pre=True)
    def validate_scheduled_at(cls, v):
        return parse_instant(v)

    @validator('type', pre=True)
    def validate_type(cls, v):
        # Booking forms mix 'follow-up', 'follow_up' and 'followup'
        value = str(getattr(v, "value", v) or "other").strip().lower().replace("_", "-")
        if value == "followup":
            value = "follow-up"
        valid_types = [t.value for t in AppointmentType]
        return value if value in valid_types else AppointmentType.OTHER.value

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Appointment":
        return cls(**dict(row))

    def to_dict(self):
        return {
            "appointment_id": self.appointment_id,
            "patient_id": self.patient_id,
            "doctor_id": self.doctor_id or "",
            "scheduled_at": self.scheduled_at.isoformat(),
            "type": self.type.value,
            "reminder_enabled": int(self.reminder_enabled),
            "reminder_sent_24h": int(self.reminder_sent_24h),
            "reminder_sent_1h": int(self.reminder_sent_1h),
            "status": self.status.value,
            "reminder_sent_24h_at": self.reminder_sent_24h_at,
            "reminder_sent_1h_at": self.reminder_sent_1h_at,
        }
