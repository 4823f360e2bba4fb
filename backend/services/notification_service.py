"""
Notification dispatch: contact lookup, template rendering and WhatsApp delivery
"""
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from ..db import StateStore
from ..exceptions import (
    ChannelDeliveryFailure,
    ConfigurationAbsent,
    ContactNotFound,
    ReminderError,
    StoreUnavailable,
)
from ..models.appointment import Appointment
from ..models.contact import Contact, ContactKind, DEFAULT_DISPLAY_NAMES
from ..models.medication import MedicationSchedule
from ..models.reminder import DispatchResult
from ..utils.date_utils import format_date_ar, format_datetime_ar, to_local_date
from ..utils.validation import mask_phone
from .notification_templates import DOCTOR_TEMPLATES, RECIPIENT_ARGUMENT, render, type_label
from .whatsapp_channel import WhatsAppChannel

logger = logging.getLogger(__name__)

TEST_MESSAGE = "🧪 رسالة تجريبية من رفيق الأمل. إذا وصلتك هذه الرسالة فالإشعارات تعمل بشكل صحيح."


class NotificationDispatcher:
    def __init__(self, store: StateStore, channel: Optional[WhatsAppChannel] = None):
        self.store = store
        self.channel = channel or WhatsAppChannel()

    def _get_contact(self, recipient_id: str, kind: ContactKind) -> Optional[Contact]:
        if self.store.contacts is None:
            raise StoreUnavailable(self.store.unavailable_reason or "state store is not open")
        return self.store.contacts.get_contact(recipient_id, kind)

    def get_display_name(self, recipient_id: Optional[str], kind: ContactKind) -> str:
        """Display name with the default fallback; lookup failures fall back too"""
        kind = ContactKind(kind)
        if recipient_id:
            try:
                contact = self._get_contact(recipient_id, kind)
                if contact:
                    return contact.display_name
            except StoreUnavailable as e:
                logger.error(f"Error getting {kind.value} name for {recipient_id}: {e}")
        return DEFAULT_DISPLAY_NAMES[kind.value]

    def dispatch(self, recipient_id: str, recipient_kind: ContactKind, template_kind: str,
                 template_args: Optional[Dict[str, Any]] = None) -> DispatchResult:
        """
        Resolve the recipient, render template_kind and send it over WhatsApp.

        The recipient's display name is filled in here. For doctor templates a
        'patient_id' argument is resolved to 'patient_name'. Never raises: every
        failure comes back as a DispatchResult with error_kind set.
        """
        try:
            kind = ContactKind(recipient_kind)
            if not self.channel.is_configured():
                raise ConfigurationAbsent("Twilio not configured, skipping notification")

            contact = self._get_contact(recipient_id, kind)
            logger.info(f"📱 {kind.value.capitalize()} phone for {recipient_id}: "
                        f"{mask_phone(contact.phone if contact else None)}")
            if contact is None or not contact.phone:
                raise ContactNotFound(f"No phone number found for {kind.value} {recipient_id}")

            args = dict(template_args or {})
            if template_kind in RECIPIENT_ARGUMENT:
                args[RECIPIENT_ARGUMENT[template_kind]] = contact.display_name
            if template_kind in DOCTOR_TEMPLATES and "patient_name" not in args:
                args["patient_name"] = self.get_display_name(args.pop("patient_id", None), ContactKind.PATIENT)

            body = render(template_kind, **args)

            result = self.channel.send(contact.phone, body)
            if not result.success:
                raise ChannelDeliveryFailure(result.error or "Unknown error")

            logger.info(f"✅ {template_kind} sent to {kind.value} {recipient_id}: {result.message_id}")
            return DispatchResult(success=True, message_id=result.message_id)

        except ReminderError as e:
            logger.warning(f"❌ {template_kind} for {getattr(recipient_kind, 'value', recipient_kind)} "
                           f"{recipient_id} not sent "
                           f"({type(e).__name__}): {e}")
            return DispatchResult.failure(e)
        except Exception as e:
            logger.exception(f"❌ Unexpected error sending {template_kind} to {recipient_id}")
            return DispatchResult.failure(e)

    def notify_appointment_booked(self, appointment: Appointment) -> Dict[str, DispatchResult]:
        """Booking confirmation to the patient and, when assigned, the doctor"""
        date, time = format_datetime_ar(appointment.scheduled_at)
        label = type_label(appointment.type)
        results = {
            "patient": self.dispatch(appointment.patient_id, ContactKind.PATIENT, "appointment-booked",
                                     {"date": date, "time": time, "type_label": label}),
        }
        if appointment.doctor_id:
            results["doctor"] = self.dispatch(
                appointment.doctor_id, ContactKind.DOCTOR, "appointment-booked-doctor",
                {"patient_id": appointment.patient_id, "date": date, "time": time, "type_label": label},
            )
        return results

    def notify_consultation_booked(self, patient_id: str, scheduled_at: datetime,
                                   doctor_id: Optional[str] = None) -> Dict[str, DispatchResult]:
        date, time = format_datetime_ar(scheduled_at)
        results = {
            "patient": self.dispatch(patient_id, ContactKind.PATIENT, "consultation-booked",
                                     {"date": date, "time": time}),
        }
        if doctor_id:
            results["doctor"] = self.dispatch(doctor_id, ContactKind.DOCTOR, "consultation-booked-doctor",
                                              {"patient_id": patient_id, "date": date, "time": time})
        return results

    def notify_appointment_reminder(self, appointment: Appointment, hours_until: int) -> DispatchResult:
        date, time = format_datetime_ar(appointment.scheduled_at)
        return self.dispatch(appointment.patient_id, ContactKind.PATIENT, "appointment-reminder", {
            "date": date,
            "time": time,
            "hours_until": hours_until,
            "type_label": type_label(appointment.type),
        })

    def notify_medication_added(self, schedule: MedicationSchedule) -> DispatchResult:
        start = format_date_ar(to_local_date(schedule.start_date), with_weekday=False) if schedule.start_date else ""
        return self.dispatch(schedule.patient_id, ContactKind.PATIENT, "medication-added", {
            "med_name": schedule.name,
            "dosage": schedule.dosage,
            "times": list(schedule.times_of_day),
            "start_date": start,
        })

    def notify_medication_reminder(self, patient_id: str, med_name: str, time: str) -> DispatchResult:
        return self.dispatch(patient_id, ContactKind.PATIENT, "medication-reminder",
                             {"med_name": med_name, "time": time})

    def notify_high_risk(self, patient_id: str, doctor_id: Optional[str] = None) -> Dict[str, DispatchResult]:
        results = {"patient": self.dispatch(patient_id, ContactKind.PATIENT, "high-risk-alert")}
        if doctor_id:
            results["doctor"] = self.dispatch(doctor_id, ContactKind.DOCTOR, "high-risk-alert-doctor",
                                              {"patient_id": patient_id})
        return results

    def send_custom(self, recipient_id: str, recipient_kind: ContactKind, text: str) -> DispatchResult:
        return self.dispatch(recipient_id, recipient_kind, "custom", {"free_text": text})

    def send_test_message(self, phone: str, text: Optional[str] = None) -> DispatchResult:
        """Send straight to a phone number, without a contact lookup"""
        if not self.channel.is_configured():
            return DispatchResult.failure(ConfigurationAbsent("Twilio not configured"))
        if not phone:
            return DispatchResult.failure(ContactNotFound("No phone number given"))

        result = self.channel.send(phone, text or TEST_MESSAGE)
        if not result.success:
            return DispatchResult.failure(ChannelDeliveryFailure(result.error or "Unknown error"))
        return DispatchResult(success=True, message_id=result.message_id)
