"""Tests for the medication dose reminder scanner."""

import pytest

from backend.agents.medication_reminders import MedicationReminderScanner
from backend.exceptions import StoreUnavailable


@pytest.fixture
def scanner(store, dispatcher, clock):
    return MedicationReminderScanner(store, dispatcher, now_provider=clock)


class TestDueDoses:
    def test_exact_dose_time_fires_once(self, scanner, store, channel, make_medication):
        make_medication(["09:00"])

        summary = scanner.scan()
        assert summary["sent"] == 1
        assert len(channel.sent) == 1

        summary = scanner.scan()
        assert summary["sent"] == 0
        assert summary["skipped_duplicate"] == 1
        assert len(channel.sent) == 1

    def test_once_per_day_across_tolerance_window(self, scanner, channel, clock, make_medication):
        make_medication(["09:00"])
        clock.advance(minutes=-5)
        for _ in range(3):
            scanner.scan()
            clock.advance(minutes=5)
        assert len(channel.sent) == 1

    def test_morning_dose_over_two_days(self, scanner, channel, clock, make_medication):
        make_medication(["08:00"])
        clock.now = clock.now.replace(hour=8, minute=3)
        assert scanner.scan()["sent"] == 1
        clock.advance(minutes=1)
        assert scanner.scan()["skipped_duplicate"] == 1
        clock.advance(days=1, minutes=-1)
        assert scanner.scan()["sent"] == 1
        assert len(channel.sent) == 2

    def test_fires_again_next_day(self, scanner, store, channel, clock, make_medication):
        med = make_medication(["09:00"])
        scanner.scan()
        clock.advance(days=1)
        scanner.scan()

        assert len(channel.sent) == 2
        markers = store.reminders.get_markers_for_patient(med.patient_id)
        assert [m.date_key for m in markers] == ["2026-10-19", "2026-10-20"]

    def test_tolerance_boundaries(self, scanner, channel, clock, make_medication):
        make_medication(["09:05"])
        make_medication(["08:55"])
        make_medication(["09:06"])
        make_medication(["08:54"])

        summary = scanner.scan()
        assert summary["sent"] == 2

    def test_pm_time_is_converted(self, scanner, channel, clock, make_medication):
        make_medication(["9:00 PM"])
        assert scanner.scan()["sent"] == 0

        clock.advance(hours=12)
        assert scanner.scan()["sent"] == 1

    def test_reminder_body_names_medication_and_time(self, scanner, channel, make_medication):
        make_medication(["09:00"], name="Iron")
        scanner.scan()
        to_phone, body = channel.sent[0]
        assert to_phone == "01012345678"
        assert "Mona Adel" in body
        assert "Iron" in body
        assert "09:00" in body

    def test_each_dose_time_has_its_own_marker(self, scanner, store, channel, make_medication):
        med = make_medication(["09:00", "9:00"])
        summary = scanner.scan()
        assert summary["sent"] == 2
        keys = [m.dose_time for m in store.reminders.get_markers_for_patient(med.patient_id)]
        assert sorted(keys) == ["09:00", "9:00"]


class TestInactiveSchedules:
    def test_not_started_yet(self, scanner, channel, make_medication):
        make_medication(["09:00"], start_date="2026-10-20")
        assert scanner.scan()["sent"] == 0

    def test_ended_yesterday(self, scanner, channel, make_medication):
        make_medication(["09:00"], end_date="2026-10-18")
        assert scanner.scan()["sent"] == 0

    def test_end_date_today_is_still_active(self, scanner, channel, make_medication):
        make_medication(["09:00"], end_date="2026-10-19")
        assert scanner.scan()["sent"] == 1

    def test_end_instant_earlier_today(self, scanner, channel, clock, make_medication):
        clock.advance(minutes=-57)
        make_medication(["08:00"], end_date="2026-10-19T06:00:00+03:00")
        assert scanner.scan()["sent"] == 0
        assert channel.sent == []

    def test_start_instant_later_today(self, scanner, channel, clock, make_medication):
        make_medication(["09:00"], start_date="2026-10-19T12:00:00+03:00")
        assert scanner.scan()["sent"] == 0
        clock.advance(hours=12)
        make_medication(["21:00"], start_date="2026-10-19T12:00:00+03:00")
        assert scanner.scan()["sent"] == 1

    def test_reminders_disabled(self, scanner, channel, make_medication):
        make_medication(["09:00"], reminder_enabled=False)
        summary = scanner.scan()
        assert summary["checked"] == 0
        assert channel.sent == []


class TestFailures:
    def test_unconfigured_channel_records_no_marker(self, scanner, store, channel, make_medication):
        channel.configured = False
        med = make_medication(["09:00"])

        summary = scanner.scan()
        assert summary["failed"] == 1
        assert store.reminders.get_markers_for_patient(med.patient_id) == []

        channel.configured = True
        assert scanner.scan()["sent"] == 1

    def test_delivery_failure_records_no_marker(self, scanner, store, channel, make_medication):
        channel.fail_with = "Service unavailable"
        med = make_medication(["09:00"])
        scanner.scan()
        assert store.reminders.get_markers_for_patient(med.patient_id) == []

    def test_malformed_dose_time_skips_only_that_entry(self, scanner, channel, make_medication):
        make_medication(["25:00", "soon", "09:00"])
        summary = scanner.scan()
        assert summary["errors"] == 2
        assert summary["sent"] == 1

    def test_malformed_row_is_skipped(self, scanner, store, channel, make_medication):
        store.medications.insert_raw({
            "medication_id": "BAD", "patient_id": "P1", "name": "",
            "times_of_day": '["09:00"]', "reminder_enabled": 1,
        })
        make_medication(["09:00"])
        summary = scanner.scan()
        assert summary["checked"] == 1
        assert summary["sent"] == 1

    def test_store_failure_aborts_pass(self, scanner, store, make_medication, monkeypatch):
        make_medication(["09:00"])

        def broken_lookup(key):
            raise StoreUnavailable("database is locked")

        monkeypatch.setattr(store.reminders, "has_marker", broken_lookup)
        summary = scanner.scan()
        assert summary["aborted"] is True
        assert summary["sent"] == 0
