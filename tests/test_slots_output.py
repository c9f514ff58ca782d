"""Unit tests for shaping available slots and reservations."""

from datetime import datetime

import pytest
from fastapi import HTTPException

from bookline.domain.slots.service import SlotsOutputService
from bookline.enums import SlotFormat
from bookline.models import SelectedSlot

AVAILABLE = {
    "slots": {
        "2030-01-07": [
            {"time": "2030-01-07T09:00:00.000Z"},
            {"time": "2030-01-07T09:30:00.000Z"},
        ],
        "2030-01-08": [{"time": "2030-01-08T23:30:00.000Z"}],
    }
}


class TestTimeSlots:
    def test_default_format_returns_utc_times(self, db):
        slots = SlotsOutputService(db).get_output_slots(AVAILABLE)

        assert slots == {
            "2030-01-07": ["2030-01-07T09:00:00.000Z", "2030-01-07T09:30:00.000Z"],
            "2030-01-08": ["2030-01-08T23:30:00.000Z"],
        }

    def test_time_zone_renders_offsets(self, db):
        slots = SlotsOutputService(db).get_output_slots(
            AVAILABLE, format=SlotFormat.Time, time_zone="Europe/Rome"
        )

        assert slots["2030-01-07"] == ["2030-01-07T10:00:00.000+01:00", "2030-01-07T10:30:00.000+01:00"]
        # Date keys are not re-bucketed, only the times are re-zoned
        assert slots["2030-01-08"] == ["2030-01-09T00:30:00.000+01:00"]

    def test_unknown_time_zone_is_rejected(self, db):
        with pytest.raises(HTTPException) as exc:
            SlotsOutputService(db).get_output_slots(AVAILABLE, time_zone="Mars/Olympus")

        assert exc.value.status_code == 400
        assert exc.value.detail == (
            "Could not adjust timezone for slot 2030-01-07T09:00:00.000Z with timezone Mars/Olympus"
        )


class TestRangeSlots:
    def test_ranges_use_explicit_duration(self, db):
        slots = SlotsOutputService(db).get_output_slots(AVAILABLE, duration=45, format=SlotFormat.Range)

        first = slots["2030-01-07"][0]
        assert first.start == "2030-01-07T09:00:00.000Z"
        assert first.end == "2030-01-07T09:45:00.000Z"

    def test_ranges_fall_back_to_event_type_length(self, db, event_type):
        slots = SlotsOutputService(db).get_output_slots(
            AVAILABLE, event_type_id=event_type.id, format=SlotFormat.Range, time_zone="America/New_York"
        )

        last = slots["2030-01-08"][0]
        assert last.start == "2030-01-08T18:30:00.000-05:00"
        assert last.end == "2030-01-08T19:00:00.000-05:00"

    def test_unknown_event_type(self, db):
        with pytest.raises(HTTPException) as exc:
            SlotsOutputService(db).get_output_slots(AVAILABLE, event_type_id=999, format=SlotFormat.Range)

        assert exc.value.status_code == 404

    def test_duration_or_event_type_required(self, db):
        with pytest.raises(HTTPException) as exc:
            SlotsOutputService(db).get_output_slots(AVAILABLE, format=SlotFormat.Range)

        assert exc.value.status_code == 400
        assert exc.value.detail == "duration or eventTypeId is required"

    def test_invalid_slot_time(self, db):
        broken = {"slots": {"2030-01-07": [{"time": "not-a-date"}]}}

        with pytest.raises(HTTPException) as exc:
            SlotsOutputService(db).get_output_slots(broken, duration=30, format=SlotFormat.Range)

        assert exc.value.detail == "Could not create UTC time for slot not-a-date"


class TestReservedSlotOutput:
    def test_reserved_slot(self, db, event_type):
        slot = SelectedSlot(
            uid="res-1",
            event_type_id=event_type.id,
            slot_utc_start_date=datetime(2030, 1, 7, 9, 0),
            slot_utc_end_date=datetime(2030, 1, 7, 9, 30),
            release_at=datetime(2030, 1, 6, 8, 5),
        )

        output = SlotsOutputService(db).get_output_reserved_slot(slot, reservation_duration=5)

        assert output.model_dump() == {
            "eventTypeId": event_type.id,
            "slotStart": "2030-01-07T09:00:00.000Z",
            "slotEnd": "2030-01-07T09:30:00.000Z",
            "slotDuration": 30,
            "reservationUid": "res-1",
            "reservationUntil": "2030-01-06T08:05:00.000Z",
            "reservationDuration": 5,
        }

    def test_missing_dates_use_placeholders(self, db, event_type):
        slot = SelectedSlot(uid="res-2", event_type_id=event_type.id)

        output = SlotsOutputService(db).get_output_slot(slot)

        assert output.slotStart == "unknown-slot-start"
        assert output.slotEnd == "unknown-slot-end"
        assert output.reservationUntil == "unknown-reserved-until"
        assert output.slotDuration == 0
