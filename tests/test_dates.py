"""Tests for the shared date helpers."""

from datetime import datetime, timezone

import pytest

from bookline.shared.dates import end_of_month, get_zone, parse_iso, start_of_month, to_iso, to_naive_utc


def test_to_iso_utc_uses_z_and_milliseconds():
    value = datetime(2030, 1, 7, 9, 0, 5, 123456)

    assert to_iso(value) == "2030-01-07T09:00:05.123Z"


def test_to_iso_renders_zone_offset():
    value = datetime(2030, 7, 1, 12, 0, tzinfo=timezone.utc)

    assert to_iso(value, get_zone("America/Los_Angeles")) == "2030-07-01T05:00:00.000-07:00"
    assert to_iso(value, get_zone("Asia/Kolkata")) == "2030-07-01T17:30:00.000+05:30"


def test_parse_iso_treats_naive_as_utc():
    assert parse_iso("2030-01-07T09:00:00") == datetime(2030, 1, 7, 9, 0, tzinfo=timezone.utc)
    assert to_naive_utc(parse_iso("2030-01-07T10:00:00+01:00")) == datetime(2030, 1, 7, 9, 0)


def test_month_boundaries():
    value = datetime(2030, 2, 14, 15, 30)

    assert start_of_month(value) == datetime(2030, 2, 1)
    assert end_of_month(value) == datetime(2030, 2, 28, 23, 59, 59, 999000)


def test_unknown_zone():
    with pytest.raises(ValueError):
        get_zone("Nowhere/Special")
