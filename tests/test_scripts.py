import json

import pytest
from filelock import FileLock

from backend.db import StateStore
from backend.models.contact import Contact, ContactKind
from backend.services import notification_service
from scripts import run_scheduler, send_notification


@pytest.fixture(autouse=True)
def in_tmp_dir(tmp_path, monkeypatch):
    # setup_logging writes logs/notifications.log under the working directory
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def fake_channel(channel, monkeypatch):
    monkeypatch.setattr(notification_service, "WhatsAppChannel", lambda: channel)
    return channel


def test_test_command_needs_no_store(fake_channel, capsys):
    code = send_notification.main(["--db", "", "test", "--phone", "01012345678", "--text", "ping"])
    assert code == 0
    assert fake_channel.sent == [("01012345678", "ping")]
    assert json.loads(capsys.readouterr().out)["message_id"] == "SM0001"


def test_custom_command(tmp_path, fake_channel, capsys):
    db = str(tmp_path / "portal.db")
    StateStore(db).contacts.upsert_contact(
        Contact(contact_id="P1", kind=ContactKind.PATIENT, name="Mona", phone="01012345678"))

    code = send_notification.main(["--db", db, "custom", "--recipient", "P1", "--text", "hello"])
    assert code == 0
    assert "hello" in fake_channel.sent[0][1]


def test_unknown_medication(tmp_path, fake_channel, capsys):
    code = send_notification.main(["--db", str(tmp_path / "portal.db"), "medication-added",
                                   "--medication", "M404"])
    assert code == 1
    assert "Medication not found" in capsys.readouterr().err


def test_store_unavailable(fake_channel, capsys):
    code = send_notification.main(["--db", "", "high-risk", "--patient", "P1"])
    assert code == 1
    assert "State store unavailable" in capsys.readouterr().err


def test_failed_send_exits_nonzero(tmp_path, fake_channel, capsys):
    code = send_notification.main(["--db", str(tmp_path / "portal.db"), "custom",
                                   "--recipient", "P404", "--text", "hello"])
    assert code == 1
    assert json.loads(capsys.readouterr().out)["error_kind"] == "ContactNotFound"


def test_scheduler_once(tmp_path, fake_channel, capsys):
    code = run_scheduler.main(["--db", str(tmp_path / "portal.db"), "--once"])
    assert code == 0
    results = json.loads(capsys.readouterr().out)
    assert results["appointments"]["checked"] == 0
    assert results["medications"]["checked"] == 0


def test_scheduler_disabled_without_store(fake_channel):
    assert run_scheduler.main(["--db", "", "--once"]) == 1


def test_scheduler_lock_path(tmp_path):
    path = run_scheduler.lock_path_for(str(tmp_path / "data" / "portal.db"))
    assert path == str(tmp_path / "data" / "reminder_scheduler.lock")


def test_scheduler_once_waits_for_lock(tmp_path, fake_channel, capsys):
    db = str(tmp_path / "portal.db")
    with FileLock(run_scheduler.lock_path_for(db)):
        assert run_scheduler.main(["--db", db, "--once"]) == 1
    assert capsys.readouterr().out == ""
    assert fake_channel.sent == []
