import json
from datetime import date, datetime
from typing import List, Optional, Dict, Any, Union
from pydantic import BaseModel, validator

from ..utils.date_utils import localize, parse_schedule_bound


class MedicationSchedule(BaseModel):
    medication_id: str
    patient_id: str
    name: str
    dosage: str = ""
    times_of_day: List[str] = []
    # A bare date covers the whole clinic-local day; a value with a time is an exact instant
    start_date: Optional[Union[datetime, date]] = None
    end_date: Optional[Union[datetime, date]] = None
    reminder_enabled: bool = False
    @validator('medication_id', 'patient_id', 'name', pre=True)
    def validate_required(cls, v):
        if v is None or not str(v).strip():
            raise ValueError('field must not be empty')
        return str(v).strip()

    @validator('dosage', pre=True)
    def validate_dosage(cls, v):
        return "" if v is None else str(v)

    @validator('times_of_day', pre=True)
    def validate_times(cls, v):
        # SQLite keeps the list as JSON text
        if v is None or v == "":
            return []
        if isinstance(v, str):
            v = json.loads(v)
        if not isinstance(v, (list, tuple)):
            raise ValueError('times_of_day must be a list')
        return [str(t).strip() for t in v if str(t).strip()]

    @validator('start_date', 'end_date', pre=True)
    def validate_dates(cls, v):
        if v is None or v == "":
            return None
        return parse_schedule_bound(v)

    def is_active(self, now: datetime) -> bool:
        """Started at or before now and not yet ended"""
        now = localize(now)
        today = now.date()
        start, end = self.start_date, self.end_date
        if start is not None:
            if isinstance(start, datetime):
                if start > now:
                    return False
            elif start > today:
                return False
        if end is not None:
            if isinstance(end, datetime):
                if end < now:
                    return False
            elif end < today:
                return False
        return True

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "MedicationSchedule":
        return cls(**dict(row))

    def to_dict(self):
        return {
            "medication_id": self.medication_id,
            "patient_id": self.patient_id,
            "name": self.name,
            "dosage": self.dosage,
            "times_of_day": json.dumps(self.times_of_day, ensure_ascii=False),
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "reminder_enabled": int(self.reminder_enabled),
        }
