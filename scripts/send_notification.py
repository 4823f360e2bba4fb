# scripts/send_notification.py
"""
Send a one-off WhatsApp notification.
Usage:
  python -m scripts.send_notification test --phone 01012345678
  python -m scripts.send_notification custom --recipient P1 --kind patient --text "..."
  python -m scripts.send_notification appointment-booked --appointment A1
  python -m scripts.send_notification medication-added --medication M1
  python -m scripts.send_notification high-risk --patient P1 --doctor D1
"""
import sys
import json
import argparse
from dotenv import load_dotenv

load_dotenv()

from backend.db import StateStore
from backend.models.contact import ContactKind
from backend.notifications import setup_logging
from backend.services.notification_service import NotificationDispatcher
from backend.utils.config import config


def _print(results) -> int:
    if isinstance(results, dict):
        payload = {k: v.to_dict() for k, v in results.items()}
        ok = all(v.success for v in results.values())
    else:
        payload = results.to_dict()
        ok = results.success
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0 if ok else 1


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Send a manual WhatsApp notification.")
    p.add_argument("--db", default=config.DB_PATH)
    sub = p.add_subparsers(dest="command", required=True)

    test = sub.add_parser("test", help="send a test message straight to a phone number")
    test.add_argument("--phone", required=True)
    test.add_argument("--text")

    custom = sub.add_parser("custom", help="send free text to a patient or doctor")
    custom.add_argument("--recipient", required=True)
    custom.add_argument("--kind", choices=[k.value for k in ContactKind], default="patient")
    custom.add_argument("--text", required=True)

    booked = sub.add_parser("appointment-booked", help="booking confirmation for an appointment")
    booked.add_argument("--appointment", required=True)

    med = sub.add_parser("medication-added", help="new medication notice for a schedule")
    med.add_argument("--medication", required=True)

    risk = sub.add_parser("high-risk", help="high risk alert to a patient and optionally the doctor")
    risk.add_argument("--patient", required=True)
    risk.add_argument("--doctor")
    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()

    store = StateStore(args.db)
    dispatcher = NotificationDispatcher(store)

    if args.command == "test":
        return _print(dispatcher.send_test_message(args.phone, args.text))

    if not store.is_available():
        print(f"State store unavailable: {store.unavailable_reason}", file=sys.stderr)
        return 1

    if args.command == "custom":
        return _print(dispatcher.send_custom(args.recipient, ContactKind(args.kind), args.text))

    if args.command == "appointment-booked":
        appointment = store.appointments.get_appointment_by_id(args.appointment)
        if appointment is None:
            print(f"Appointment not found: {args.appointment}", file=sys.stderr)
            return 1
        return _print(dispatcher.notify_appointment_booked(appointment))

    if args.command == "medication-added":
        medication = store.medications.get_medication_by_id(args.medication)
        if medication is None:
            print(f"Medication not found: {args.medication}", file=sys.stderr)
            return 1
        return _print(dispatcher.notify_medication_added(medication))

    return _print(dispatcher.notify_high_risk(args.patient, args.doctor))


if __name__ == "__main__":
    sys.exit(main())
