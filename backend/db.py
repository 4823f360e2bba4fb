from __future__ import annotations
import logging
from typing import Optional

from .database.connection import get_connection
from .database.appointment_db import AppointmentDB
from .database.contact_db import ContactDB
from .database.medication_db import MedicationDB
from .database.reminder_db import ReminderDB
from .exceptions import StoreUnavailable
from .utils.config import config

logger = logging.getLogger(__name__)


class StateStore:
    """
    The portal's records as the reminder core sees them: appointments,
    medication schedules, contacts and medication reminder markers.

    Construction never raises. When the database cannot be opened the store
    reports itself unavailable and the table accessors stay None.
    """

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = config.DB_PATH if db_path is None else db_path
        self.appointments: Optional[AppointmentDB] = None
        self.medications: Optional[MedicationDB] = None
        self.contacts: Optional[ContactDB] = None
        self.reminders: Optional[ReminderDB] = None
        self.unavailable_reason: Optional[str] = None

        if not self.db_path:
            self.unavailable_reason = "no database path configured (DB_PATH)"
            return

        try:
            self.appointments = AppointmentDB(self.db_path)
            self.medications = MedicationDB(self.db_path)
            self.contacts = ContactDB(self.db_path)
            self.reminders = ReminderDB(self.db_path)
        except (StoreUnavailable, OSError) as e:
            self.unavailable_reason = str(e)
            logger.error(f"State store unavailable: {e}")

    def is_available(self) -> bool:
        """True when the store was opened at construction and still answers"""
        if self.unavailable_reason:
            return False
        try:
            with get_connection(self.db_path) as conn:
                conn.execute("SELECT 1").fetchone()
            return True
        except StoreUnavailable as e:
            logger.error(f"State store check failed: {e}")
            return False
