from datetime import datetime
from typing import Any, Callable, Dict, Optional
import logging

from ..db import StateStore
from ..exceptions import StoreUnavailable
from ..models.medication import MedicationSchedule
from ..models.reminder import ReminderMarker
from ..services.notification_service import NotificationDispatcher
from ..utils.config import config
from ..utils.date_utils import date_key, get_current_local, localize, minutes_apart, parse_dose_time

logger = logging.getLogger(__name__)


class MedicationReminderScanner:
    """
    Sends dose reminders for active medication schedules.

    A dose is due when now is within the tolerance of its time of day. At most
    one reminder goes out per (schedule, dose time, calendar date), enforced
    by the reminder markers.
    """

    def __init__(self, store: StateStore, dispatcher: NotificationDispatcher,
                 now_provider: Optional[Callable[[], datetime]] = None,
                 tolerance_minutes: Optional[int] = None):
        self.store = store
        self.dispatcher = dispatcher
        self.now_provider = now_provider or get_current_local
        self.tolerance_minutes = (config.MEDICATION_TOLERANCE_MINUTES
                                  if tolerance_minutes is None else tolerance_minutes)

    def scan(self) -> Dict[str, Any]:
        """One pass over all reminder-enabled schedules. Never raises."""
        summary = {"checked": 0, "due": 0, "sent": 0, "skipped_duplicate": 0,
                   "failed": 0, "errors": 0, "aborted": False}

        try:
            if self.store.medications is None or self.store.reminders is None:
                raise StoreUnavailable(self.store.unavailable_reason or "state store is not open")

            now = localize(self.now_provider())
            schedules = self.store.medications.get_reminder_enabled()

            for schedule in schedules:
                summary["checked"] += 1
                if not schedule.is_active(now):
                    continue
                try:
                    self._check_schedule(schedule, now, summary)
                except StoreUnavailable:
                    raise
                except Exception as e:
                    summary["errors"] += 1
                    logger.error(f"Error checking reminders for medication {schedule.medication_id}: {e}")

        except StoreUnavailable as e:
            summary["aborted"] = True
            logger.error(f"Medication reminder pass aborted, state store unavailable: {e}")
        except Exception as e:
            summary["aborted"] = True
            logger.exception(f"Medication reminder pass aborted: {e}")

        logger.info(f"Medication reminder scan complete: {summary}")
        return summary

    def _check_schedule(self, schedule: MedicationSchedule, now: datetime, summary: Dict[str, Any]):
        for dose_time in schedule.times_of_day:
            try:
                hour, minute = parse_dose_time(dose_time)
            except ValueError as e:
                summary["errors"] += 1
                logger.warning(f"Skipping dose time on medication {schedule.medication_id}: {e}")
                continue

            if minutes_apart(now, hour, minute) > self.tolerance_minutes:
                continue

            summary["due"] += 1
            marker = ReminderMarker(
                schedule_id=schedule.medication_id,
                dose_time=dose_time,
                date_key=date_key(now),
                patient_id=schedule.patient_id,
            )
            if self.store.reminders.has_marker(marker.key):
                summary["skipped_duplicate"] += 1
                continue

            self._send_reminder(schedule, marker, summary)

    def _send_reminder(self, schedule: MedicationSchedule, marker: ReminderMarker, summary: Dict[str, Any]):
        logger.info(f"💊 Dose reminder due: {marker.field_name}")
        result = self.dispatcher.notify_medication_reminder(schedule.patient_id, schedule.name, marker.dose_time)

        if result.error_kind == StoreUnavailable.__name__:
            raise StoreUnavailable(result.error)

        if not result.success:
            summary["failed"] += 1
            logger.warning(f"Dose reminder {marker.field_name} not sent ({result.error_kind}): {result.error}")
            return

        self.store.reminders.record_marker(marker)
        summary["sent"] += 1
