from typing import Optional, List, Dict
import logging
from pydantic import ValidationError

from .connection import ensure_parent_dir, get_connection
from ..models.medication import MedicationSchedule

logger = logging.getLogger(__name__)


class MedicationDB:
    def __init__(self, db_path: str = "data/portal.db"):
        self.db_path = db_path
        ensure_parent_dir(db_path)
        self._init_db()

    def _init_db(self):
        """Initialize medications table"""
        with get_connection(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS medications (
                    medication_id TEXT PRIMARY KEY,
                    patient_id TEXT,
                    name TEXT,
                    dosage TEXT,
                    times_of_day TEXT,
                    start_date TEXT,
                    end_date TEXT,
                    reminder_enabled INTEGER DEFAULT 0
                )
            """)

    def create_medication(self, medication: MedicationSchedule):
        """Create a new medication schedule"""
        self.insert_raw(medication.to_dict())

    def insert_raw(self, row: Dict):
        """Insert a row as-is, without model validation"""
        columns = ", ".join(row.keys())
        placeholders = ", ".join("?" for _ in row)
        with get_connection(self.db_path) as conn:
            conn.execute(
                f"INSERT INTO medications ({columns}) VALUES ({placeholders})",
                list(row.values()),
            )

    def get_medication_by_id(self, medication_id: str) -> Optional[MedicationSchedule]:
        with get_connection(self.db_path) as conn:
            row = conn.execute(
                "SELECT * FROM medications WHERE medication_id = ?", (medication_id,)
            ).fetchone()

        if row is None:
            return None
        return MedicationSchedule.from_row(row)

    def get_reminder_enabled(self) -> List[MedicationSchedule]:
        """
        Schedules with reminders switched on. Active date range is checked by the caller.
        Rows that fail validation are logged and skipped.
        """
        with get_connection(self.db_path) as conn:
            rows = conn.execute(
                "SELECT * FROM medications WHERE reminder_enabled = 1"
            ).fetchall()

        medications = []
        for row in rows:
            try:
                medications.append(MedicationSchedule.from_row(row))
            except (ValidationError, ValueError, TypeError) as e:
                logger.warning(f"Skipping malformed medication {row['medication_id']}: {e}")
        return medications
