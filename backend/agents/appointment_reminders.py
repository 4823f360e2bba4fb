from datetime import datetime
from typing import Any, Callable, Dict, Optional, Tuple
import logging

from ..db import StateStore
from ..exceptions import StoreUnavailable
from ..models.appointment import Appointment
from ..models.reminder import DispatchResult
from ..services.notification_service import NotificationDispatcher
from ..utils.config import config
from ..utils.date_utils import get_current_local, hours_until, localize, round_half_up

logger = logging.getLogger(__name__)


def in_window(value: float, window: Tuple[float, float]) -> bool:
    """Half-open window check: lower < value <= upper"""
    lower, upper = window
    return lower < value <= upper


class AppointmentReminderScanner:
    """
    Sends the 24-hour and 1-hour appointment reminders.

    Each reminder fires once: the matching reminder_sent_* flag is set on the
    appointment after a successful send and checked before every send.
    """

    def __init__(self, store: StateStore, dispatcher: NotificationDispatcher,
                 now_provider: Optional[Callable[[], datetime]] = None,
                 day_window: Optional[Tuple[float, float]] = None,
                 hour_window: Optional[Tuple[float, float]] = None):
        self.store = store
        self.dispatcher = dispatcher
        self.now_provider = now_provider or get_current_local
        self.day_window = day_window or config.DAY_REMINDER_WINDOW
        self.hour_window = hour_window or config.HOUR_REMINDER_WINDOW

    def scan(self) -> Dict[str, Any]:
        """One pass over all reminder-eligible appointments. Never raises."""
        summary = {"checked": 0, "sent_24h": 0, "sent_1h": 0, "failed": 0, "errors": 0, "aborted": False}

        try:
            if self.store.appointments is None:
                raise StoreUnavailable(self.store.unavailable_reason or "state store is not open")

            now = localize(self.now_provider())
            appointments = self.store.appointments.get_reminder_eligible()

            for appointment in appointments:
                summary["checked"] += 1
                try:
                    self._check_appointment(appointment, now, summary)
                except StoreUnavailable:
                    raise
                except Exception as e:
                    summary["errors"] += 1
                    logger.error(f"Error checking reminders for appointment {appointment.appointment_id}: {e}")

        except StoreUnavailable as e:
            summary["aborted"] = True
            logger.error(f"Appointment reminder pass aborted, state store unavailable: {e}")
        except Exception as e:
            summary["aborted"] = True
            logger.exception(f"Appointment reminder pass aborted: {e}")

        logger.info(f"Appointment reminder scan complete: {summary}")
        return summary

    def _check_appointment(self, appointment: Appointment, now: datetime, summary: Dict[str, Any]):
        hours = hours_until(appointment.scheduled_at, now)
        if hours <= 0:
            return

        if in_window(hours, self.day_window) and not appointment.reminder_sent_24h:
            self._send_reminder(appointment, hours, "24h", summary)

        if in_window(hours, self.hour_window) and not appointment.reminder_sent_1h:
            self._send_reminder(appointment, hours, "1h", summary)

    def _send_reminder(self, appointment: Appointment, hours: float, window: str, summary: Dict[str, Any]):
        logger.info(f"📅 {window} reminder due for appointment {appointment.appointment_id} "
                    f"({hours:.2f}h ahead)")
        result: DispatchResult = self.dispatcher.notify_appointment_reminder(appointment, round_half_up(hours))

        if result.error_kind == StoreUnavailable.__name__:
            raise StoreUnavailable(result.error)

        if not result.success:
            summary["failed"] += 1
            logger.warning(f"{window} reminder for appointment {appointment.appointment_id} not sent "
                           f"({result.error_kind}): {result.error}")
            return

        self.store.appointments.mark_reminder_sent(appointment.appointment_id, window)
        summary[f"sent_{window}"] += 1
