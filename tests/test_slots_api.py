"""API tests for available slots and slot reservations."""

from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient

from bookline.domain.slots.repository import SelectedSlotRepository
from bookline.models import SelectedSlot
from bookline.shared.dates import utc_now

from tests.conftest import make_booking

pytestmark = pytest.mark.asyncio

# 2030-01-07 is a Monday
RANGE = {"start": "2030-01-07T00:00:00Z", "end": "2030-01-08T00:00:00Z"}


class TestGetSlots:
    async def test_working_hours_are_split_into_slots(self, client: AsyncClient, event_type):
        response = await client.get("/v2/slots", params={"eventTypeId": event_type.id, **RANGE})

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        times = body["data"]["2030-01-07"]
        assert len(times) == 16
        assert times[0] == "2030-01-07T09:00:00.000Z"
        assert times[-1] == "2030-01-07T16:30:00.000Z"

    async def test_bookings_and_reservations_block_slots(self, client: AsyncClient, db, host, event_type):
        make_booking(db, host, datetime(2030, 1, 7, 10, 0), event_type=event_type)
        SelectedSlotRepository.create(
            db,
            event_type_id=event_type.id,
            slot_utc_start_date=datetime(2030, 1, 7, 11, 0),
            slot_utc_end_date=datetime(2030, 1, 7, 11, 30),
            release_at=utc_now() + timedelta(minutes=5),
        )

        response = await client.get("/v2/slots", params={"eventTypeId": event_type.id, **RANGE})

        times = response.json()["data"]["2030-01-07"]
        assert "2030-01-07T10:00:00.000Z" not in times
        assert "2030-01-07T11:00:00.000Z" not in times
        assert len(times) == 14

    async def test_range_format_in_time_zone(self, client: AsyncClient, event_type):
        response = await client.get(
            "/v2/slots",
            params={"eventTypeId": event_type.id, "format": "range", "timeZone": "Europe/Rome", **RANGE},
        )

        assert response.status_code == 200
        first = response.json()["data"]["2030-01-07"][0]
        assert first == {"start": "2030-01-07T10:00:00.000+01:00", "end": "2030-01-07T10:30:00.000+01:00"}

    async def test_weekend_has_no_slots(self, client: AsyncClient, event_type):
        response = await client.get(
            "/v2/slots",
            params={"eventTypeId": event_type.id, "start": "2030-01-05T00:00:00Z", "end": "2030-01-07T00:00:00Z"},
        )

        assert response.json()["data"] == {}

    async def test_unknown_event_type(self, client: AsyncClient):
        response = await client.get("/v2/slots", params={"eventTypeId": 404, **RANGE})

        assert response.status_code == 404

    async def test_end_before_start(self, client: AsyncClient, event_type):
        response = await client.get(
            "/v2/slots",
            params={"eventTypeId": event_type.id, "start": RANGE["end"], "end": RANGE["start"]},
        )

        assert response.status_code == 400

    async def test_unknown_time_zone(self, client: AsyncClient, event_type):
        response = await client.get(
            "/v2/slots", params={"eventTypeId": event_type.id, "timeZone": "Mars/Olympus", **RANGE}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == (
            f"Could not adjust timezone for slot {RANGE['start']} with timezone Mars/Olympus"
        )


class TestReservations:
    async def test_reserve_get_and_release(self, client: AsyncClient, event_type):
        payload = {"eventTypeId": event_type.id, "slotStart": "2030-01-07T09:00:00Z"}

        created = await client.post("/v2/slots/reservations", json=payload)
        assert created.status_code == 201
        data = created.json()["data"]
        assert data["slotStart"] == "2030-01-07T09:00:00.000Z"
        assert data["slotEnd"] == "2030-01-07T09:30:00.000Z"
        assert data["slotDuration"] == 30
        assert data["reservationDuration"] == 5

        uid = data["reservationUid"]
        fetched = await client.get(f"/v2/slots/reservations/{uid}")
        assert fetched.status_code == 200
        assert fetched.json()["data"]["reservationUid"] == uid
        assert "reservationDuration" not in fetched.json()["data"]

        deleted = await client.delete(f"/v2/slots/reservations/{uid}")
        assert deleted.json() == {"status": "success"}
        missing = await client.get(f"/v2/slots/reservations/{uid}")
        assert missing.status_code == 404

    async def test_reserved_slot_cannot_be_reserved_again(self, client: AsyncClient, event_type):
        payload = {"eventTypeId": event_type.id, "slotStart": "2030-01-07T09:00:00Z", "reservationDuration": 10}

        first = await client.post("/v2/slots/reservations", json=payload)
        second = await client.post("/v2/slots/reservations", json=payload)

        assert first.status_code == 201
        assert second.status_code == 409
        assert second.json()["detail"] == "This slot is already reserved"

    async def test_booked_slot_cannot_be_reserved(self, client: AsyncClient, db, host, event_type):
        make_booking(db, host, datetime(2030, 1, 7, 9, 0), event_type=event_type)

        response = await client.post(
            "/v2/slots/reservations", json={"eventTypeId": event_type.id, "slotStart": "2030-01-07T09:15:00Z"}
        )

        assert response.status_code == 409
        assert response.json()["detail"] == "This slot is already booked"

    async def test_invalid_slot_start(self, client: AsyncClient, event_type):
        response = await client.post(
            "/v2/slots/reservations", json={"eventTypeId": event_type.id, "slotStart": "tomorrow"}
        )

        assert response.status_code == 422

    async def test_expired_reservations_are_released(self, db, event_type):
        SelectedSlotRepository.create(
            db,
            event_type_id=event_type.id,
            slot_utc_start_date=datetime(2030, 1, 7, 9, 0),
            slot_utc_end_date=datetime(2030, 1, 7, 9, 30),
            release_at=utc_now() - timedelta(minutes=1),
        )

        assert SelectedSlotRepository.delete_expired(db, utc_now()) == 1
        assert db.query(SelectedSlot).count() == 0
