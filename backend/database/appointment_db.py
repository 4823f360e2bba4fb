from typing import Optional, List, Dict
import logging
from pydantic import ValidationError

from .connection import ensure_parent_dir, get_connection
from ..models.appointment import Appointment, AppointmentStatus
from ..utils.date_utils import get_current_local

logger = logging.getLogger(__name__)

# The only flags the reminder scanner may set, with their audit columns
REMINDER_FLAGS = {
    "24h": ("reminder_sent_24h", "reminder_sent_24h_at"),
    "1h": ("reminder_sent_1h", "reminder_sent_1h_at"),
}


class AppointmentDB:
    def __init__(self, db_path: str = "data/portal.db"):
        self.db_path = db_path
        ensure_parent_dir(db_path)
        self._init_db()

    def _init_db(self):
        """Initialize appointments table"""
        with get_connection(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS appointments (
                    appointment_id TEXT PRIMARY KEY,
                    patient_id TEXT,
                    doctor_id TEXT,
                    scheduled_at TEXT,
                    type TEXT DEFAULT 'other',
                    reminder_enabled INTEGER DEFAULT 0,
                    reminder_sent_24h INTEGER DEFAULT 0,
                    reminder_sent_1h INTEGER DEFAULT 0,
                    status TEXT DEFAULT 'upcoming',
                    reminder_sent_24h_at TEXT,
                    reminder_sent_1h_at TEXT
                )
            """)

    def create_appointment(self, appointment: Appointment):
        """Create a new appointment"""
        self.insert_raw(appointment.to_dict())

    def insert_raw(self, row: Dict):
        """Insert a row as-is, without model validation"""
        columns = ", ".join(row.keys())
        placeholders = ", ".join("?" for _ in row)
        with get_connection(self.db_path) as conn:
            conn.execute(
                f"INSERT INTO appointments ({columns}) VALUES ({placeholders})",
                list(row.values()),
            )

    def get_appointment_by_id(self, appointment_id: str) -> Optional[Appointment]:
        """Get appointment by ID"""
        with get_connection(self.db_path) as conn:
            row = conn.execute(
                "SELECT * FROM appointments WHERE appointment_id = ?", (appointment_id,)
            ).fetchone()

        if row is None:
            return None
        return Appointment.from_row(row)

    def get_reminder_eligible(self) -> List[Appointment]:
        """
        Upcoming appointments with reminders switched on.
        Rows that fail validation are logged and skipped.
        """
        with get_connection(self.db_path) as conn:
            rows = conn.execute(
                "SELECT * FROM appointments WHERE status = ? AND reminder_enabled = 1",
                (AppointmentStatus.UPCOMING.value,),
            ).fetchall()

        appointments = []
        for row in rows:
            try:
                appointments.append(Appointment.from_row(row))
            except (ValidationError, ValueError, TypeError) as e:
                logger.warning(f"Skipping malformed appointment {row['appointment_id']}: {e}")
        return appointments

    def mark_reminder_sent(self, appointment_id: str, window: str):
        """Set a reminder flag to true. Flags are never cleared here."""
        flag, audit_column = REMINDER_FLAGS[window]
        with get_connection(self.db_path) as conn:
            conn.execute(
                f"UPDATE appointments SET {flag} = 1, {audit_column} = ? WHERE appointment_id = ?",
                (get_current_local().isoformat(), appointment_id),
            )
        logger.info(f"Marked {window} reminder sent for appointment {appointment_id}")
