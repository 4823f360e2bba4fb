"""Shared pytest fixtures."""

from datetime import datetime, timedelta

import pytest

from backend.db import StateStore
from backend.models.appointment import Appointment
from backend.models.contact import Contact, ContactKind
from backend.models.medication import MedicationSchedule
from backend.models.reminder import ChannelResult
from backend.services.notification_service import NotificationDispatcher
from backend.utils.date_utils import localize


class FakeChannel:
    """Records sends instead of calling Twilio."""

    def __init__(self, configured=True):
        self.configured = configured
        self.sent = []
        self.fail_with = None

    def is_configured(self):
        return self.configured

    def send(self, to_phone, body):
        if self.fail_with:
            return ChannelResult(success=False, error=self.fail_with)
        self.sent.append((to_phone, body))
        return ChannelResult(success=True, message_id=f"SM{len(self.sent):04d}")


class FixedClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def store(tmp_path):
    return StateStore(str(tmp_path / "portal.db"))


@pytest.fixture
def channel():
    return FakeChannel()


@pytest.fixture
def dispatcher(store, channel):
    return NotificationDispatcher(store, channel)


@pytest.fixture
def clock():
    # Monday morning, clinic time
    return FixedClock(localize(datetime(2026, 10, 19, 9, 0)))


@pytest.fixture
def patient(store):
    contact = Contact(contact_id="P1", kind=ContactKind.PATIENT, name="Mona Adel", phone="01012345678")
    store.contacts.upsert_contact(contact)
    return contact


@pytest.fixture
def doctor(store):
    contact = Contact(contact_id="D1", kind=ContactKind.DOCTOR, name="Hany Samir", phone="01198765432")
    store.contacts.upsert_contact(contact)
    return contact


@pytest.fixture
def make_appointment(store, patient):
    counter = {"n": 0}

    def _make(scheduled_at, **overrides):
        counter["n"] += 1
        fields = {
            "appointment_id": f"A{counter['n']}",
            "patient_id": patient.contact_id,
            "scheduled_at": scheduled_at,
            "type": "consultation",
            "reminder_enabled": True,
            "status": "upcoming",
        }
        fields.update(overrides)
        appointment = Appointment(**fields)
        store.appointments.create_appointment(appointment)
        return appointment

    return _make


@pytest.fixture
def make_medication(store, patient):
    counter = {"n": 0}

    def _make(times_of_day, **overrides):
        counter["n"] += 1
        fields = {
            "medication_id": f"M{counter['n']}",
            "patient_id": patient.contact_id,
            "name": "Folic Acid",
            "dosage": "5mg",
            "times_of_day": times_of_day,
            "start_date": "2026-10-01",
            "end_date": None,
            "reminder_enabled": True,
        }
        fields.update(overrides)
        medication = MedicationSchedule(**fields)
        store.medications.create_medication(medication)
        return medication

    return _make
