from typing import List, Tuple
import logging

from .connection import ensure_parent_dir, get_connection
from ..models.reminder import ReminderMarker
from ..utils.date_utils import get_current_local

logger = logging.getLogger(__name__)


class ReminderDB:
    """
    Medication reminder markers, keyed by (schedule_id, dose_time, date_key).

    Markers are only ever inserted. Nothing here expires them, so the table
    grows by one row per dose reminder sent.
    """

    def __init__(self, db_path: str = "data/portal.db"):
        self.db_path = db_path
        ensure_parent_dir(db_path)
        self._init_db()

    def _init_db(self):
        """Initialize reminder_markers table"""
        with get_connection(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS reminder_markers (
                    schedule_id TEXT NOT NULL,
                    dose_time TEXT NOT NULL,
                    date_key TEXT NOT NULL,
                    patient_id TEXT NOT NULL,
                    sent_at TEXT NOT NULL,
                    PRIMARY KEY (schedule_id, dose_time, date_key)
                )
            """)

    def has_marker(self, key: Tuple[str, str, str]) -> bool:
        """Check whether a reminder was already sent for this dose and day"""
        with get_connection(self.db_path) as conn:
            row = conn.execute("""
                SELECT 1 FROM reminder_markers
                WHERE schedule_id = ? AND dose_time = ? AND date_key = ?
            """, key).fetchone()
        return row is not None

    def record_marker(self, marker: ReminderMarker) -> ReminderMarker:
        """Persist a marker after a successful send. Existing markers are left untouched."""
        sent_at = marker.sent_at or get_current_local().isoformat()
        with get_connection(self.db_path) as conn:
            conn.execute("""
                INSERT OR IGNORE INTO reminder_markers
                (schedule_id, dose_time, date_key, patient_id, sent_at)
                VALUES (?, ?, ?, ?, ?)
            """, (marker.schedule_id, marker.dose_time, marker.date_key, marker.patient_id, sent_at))

        logger.info(f"Recorded reminder marker {marker.field_name}")
        return ReminderMarker(**dict(marker.to_dict(), sent_at=sent_at))

    def get_markers_for_patient(self, patient_id: str) -> List[ReminderMarker]:
        with get_connection(self.db_path) as conn:
            rows = conn.execute("""
                SELECT * FROM reminder_markers
                WHERE patient_id = ?
                ORDER BY date_key, dose_time
            """, (patient_id,)).fetchall()
        return [ReminderMarker(**dict(row)) for row in rows]
