from datetime import date, datetime

import pytest
import pytz

from backend.utils.date_utils import (
    date_key,
    format_date_ar,
    format_datetime_ar,
    format_time_ar,
    hours_until,
    localize,
    minutes_apart,
    parse_dose_time,
    parse_instant,
    parse_schedule_bound,
    round_half_up,
    to_arabic_digits,
    to_local_date,
)


class TestParseDoseTime:
    @pytest.mark.parametrize("value,expected", [
        ("08:00", (8, 0)),
        ("8:05", (8, 5)),
        (" 23:59 ", (23, 59)),
        ("8:00 PM", (20, 0)),
        ("8:00pm", (20, 0)),
        ("12:30 PM", (12, 30)),
        ("12:15 AM", (0, 15)),
        ("1:00 am", (1, 0)),
    ])
    def test_valid(self, value, expected):
        assert parse_dose_time(value) == expected

    @pytest.mark.parametrize("value", ["", None, "24:00", "08:60", "13:00 PM", "0:30 AM", "8", "noon"])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_dose_time(value)


class TestParseInstant:
    def test_iso_string_with_offset(self):
        dt = parse_instant("2026-10-20T09:00:00+00:00")
        assert dt.utcoffset() is not None
        assert dt.astimezone(pytz.utc).hour == 9

    def test_naive_values_are_clinic_local(self):
        dt = parse_instant("2026-10-20 09:00")
        assert dt.hour == 9
        assert dt.tzinfo is not None

    def test_epoch_and_timestamp_mapping(self):
        epoch = 1792400400  # 2026-10-19T09:00:00Z
        assert parse_instant(epoch) == parse_instant({"seconds": epoch})
        assert parse_instant(epoch).astimezone(pytz.utc).hour == 9

    def test_datetime_passthrough(self):
        naive = datetime(2026, 10, 20, 9, 0)
        assert parse_instant(naive) == localize(naive)

    @pytest.mark.parametrize("value", [None, "", "not a date", True, [1, 2]])
    def test_rejects_garbage(self, value):
        with pytest.raises(ValueError):
            parse_instant(value)


def test_parse_schedule_bound():
    assert parse_schedule_bound("2026-10-19") == date(2026, 10, 19)
    assert parse_schedule_bound(date(2026, 10, 19)) == date(2026, 10, 19)
    bound = parse_schedule_bound("2026-10-19T06:00:00+03:00")
    assert isinstance(bound, datetime)
    assert bound == localize(datetime(2026, 10, 19, 6, 0))


def test_to_local_date():
    # 23:30 UTC is already the next day in Cairo
    assert to_local_date(parse_instant("2026-10-19T23:30:00+00:00")) == date(2026, 10, 20)
    assert to_local_date(date(2026, 10, 19)) == date(2026, 10, 19)


def test_minutes_apart_does_not_wrap_midnight():
    now = localize(datetime(2026, 10, 19, 23, 58))
    assert minutes_apart(now, 0, 2) == 1436
    assert minutes_apart(now, 23, 55) == 3


def test_hours_until():
    now = localize(datetime(2026, 10, 19, 9, 0))
    assert hours_until(localize(datetime(2026, 10, 20, 9, 30)), now) == 24.5
    assert hours_until(localize(datetime(2026, 10, 19, 8, 0)), now) == -1


def test_date_key():
    assert date_key(localize(datetime(2026, 10, 19, 0, 1))) == "2026-10-19"


@pytest.mark.parametrize("value,expected", [(0.4, 0), (0.5, 1), (1.49, 1), (23.5, 24), (24.17, 24)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


class TestArabicFormatting:
    def test_digits(self):
        assert to_arabic_digits("2026") == "٢٠٢٦"

    def test_date_with_weekday(self):
        assert format_date_ar(date(2026, 10, 19)) == "الاثنين، ١٩ أكتوبر ٢٠٢٦"

    def test_date_without_weekday(self):
        assert format_date_ar(date(2026, 10, 19), with_weekday=False) == "١٩ أكتوبر ٢٠٢٦"

    def test_time(self):
        assert format_time_ar(datetime(2026, 10, 19, 8, 30)) == "٠٨:٣٠ ص"
        assert format_time_ar(datetime(2026, 10, 19, 20, 5)) == "٠٨:٠٥ م"
        assert format_time_ar(datetime(2026, 10, 19, 12, 0)) == "١٢:٠٠ م"
        assert format_time_ar(datetime(2026, 10, 19, 0, 0)) == "١٢:٠٠ ص"

    def test_datetime_uses_clinic_timezone(self):
        # 07:00 UTC is 10:00 in Cairo (UTC+3 in October 2026)
        date_text, time_text = format_datetime_ar(pytz.utc.localize(datetime(2026, 10, 19, 7, 0)))
        assert date_text == "الاثنين، ١٩ أكتوبر ٢٠٢٦"
        assert time_text == "١٠:٠٠ ص"
