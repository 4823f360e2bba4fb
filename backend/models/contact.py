from enum import Enum
from typing import Optional, Dict, Any
from pydantic import BaseModel, validator

from ..utils.validation import sanitize_name

# Used when a profile has no name on file
DEFAULT_DISPLAY_NAMES = {
    "patient": "المريضة",
    "doctor": "الدكتور",
}


class ContactKind(str, Enum):
    PATIENT = "patient"
    DOCTOR = "doctor"


class Contact(BaseModel):
    contact_id: str
    kind: ContactKind
    name: Optional[str] = None
    phone: Optional[str] = None

    @validator('name', pre=True)
    def validate_name(cls, v):
        return sanitize_name(v) or None

    @validator('phone', pre=True)
    def validate_phone(cls, v):
        if v is None or not str(v).strip():
            return None
        return str(v).strip()

    @property
    def display_name(self) -> str:
        return self.name or DEFAULT_DISPLAY_NAMES[self.kind.value]

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Contact":
        return cls(**dict(row))

    def to_dict(self):
        return {
            "contact_id": self.contact_id,
            "kind": self.kind.value,
            "name": self.name or "",
            "phone": self.phone or "",
        }
