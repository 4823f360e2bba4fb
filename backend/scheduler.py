from __future__ import annotations
import logging
from typing import Any, Dict, Optional, Union

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .agents.appointment_reminders import AppointmentReminderScanner
from .agents.medication_reminders import MedicationReminderScanner
from .db import StateStore
from .services.notification_service import NotificationDispatcher
from .utils.config import config
from .utils.date_utils import get_clinic_timezone, get_current_local

logger = logging.getLogger(__name__)

SCAN_JOB_ID = "reminder_scan"


class ReminderScheduler:
    """
    Periodic driver for the appointment and medication reminder scans.

    One tick runs both scanners, each isolated from the other's failures.
    The first tick runs as soon as the scheduler starts, then every
    interval_minutes until stop(). If the state store is unavailable at
    construction the scheduler stays disabled and never schedules a tick.
    """

    def __init__(self, store: StateStore, dispatcher: Optional[NotificationDispatcher] = None,
                 appointment_scanner: Optional[AppointmentReminderScanner] = None,
                 medication_scanner: Optional[MedicationReminderScanner] = None,
                 interval_minutes: Optional[float] = None):
        self.store = store
        self.dispatcher = dispatcher or NotificationDispatcher(store)
        self.appointment_scanner = appointment_scanner or AppointmentReminderScanner(store, self.dispatcher)
        self.medication_scanner = medication_scanner or MedicationReminderScanner(store, self.dispatcher)
        self.interval_minutes = interval_minutes or config.REMINDER_INTERVAL_MINUTES

        self._scheduler: Optional[Union[BackgroundScheduler, BlockingScheduler]] = None

        self.enabled = store.is_available()
        if not self.enabled:
            logger.info("ℹ️ Scheduler disabled - state store not available "
                        f"({store.unavailable_reason or 'check failed'}). Scheduled reminders won't run.")
        elif not self.dispatcher.channel.is_configured():
            logger.warning("⚠️ WhatsApp channel not configured; scans will run but no reminders will be sent.")

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def run_once(self) -> Dict[str, Any]:
        """One tick: both scanners, each isolated"""
        results: Dict[str, Any] = {}
        for name, scanner in (("appointments", self.appointment_scanner),
                              ("medications", self.medication_scanner)):
            try:
                results[name] = scanner.scan()
            except Exception as e:
                logger.exception(f"Error checking {name} reminders: {e}")
                results[name] = None
        return results

    def _add_scan_job(self, scheduler):
        # next_run_time=now gives the immediate first tick
        scheduler.add_job(
            self.run_once,
            IntervalTrigger(seconds=self.interval_minutes * 60, timezone=get_clinic_timezone()),
            id=SCAN_JOB_ID,
            name="Appointment and medication reminders",
            next_run_time=get_current_local(),
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )

    def start(self) -> bool:
        """Start ticking in a background thread. Returns False if disabled or already running."""
        if not self.enabled:
            return False
        if self.is_running:
            logger.warning("ReminderScheduler already running")
            return False

        scheduler = BackgroundScheduler(timezone=get_clinic_timezone(), daemon=True)
        self._add_scan_job(scheduler)
        self._scheduler = scheduler
        scheduler.start()
        logger.info(f"✅ Scheduler started - checking reminders every {self.interval_minutes:g} minutes")
        return True

    def run_forever(self):
        """Tick in the calling thread until stop() is called from elsewhere"""
        if not self.enabled:
            return
        if self.is_running:
            logger.warning("ReminderScheduler already running")
            return

        scheduler = BlockingScheduler(timezone=get_clinic_timezone())
        self._add_scan_job(scheduler)
        self._scheduler = scheduler
        logger.info(f"✅ Scheduler running - checking reminders every {self.interval_minutes:g} minutes")
        scheduler.start()

    def stop(self, wait: bool = True):
        """Stop ticking; with wait=True a tick in progress is allowed to finish"""
        if self._scheduler is not None:
            if self._scheduler.running:
                self._scheduler.shutdown(wait=wait)
            self._scheduler = None
        logger.info("ReminderScheduler stopped")
