"""API tests for booking cancellation."""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

from bookline.enums import BookingStatus, WorkflowMethods
from bookline.models import Attendee, Booking, BookingSeat
from bookline.models_workflows import WorkflowReminder
from bookline.shared.dates import utc_now

from tests.conftest import auth_headers, make_booking

pytestmark = pytest.mark.asyncio

START = datetime(2030, 1, 7, 9, 0)


@pytest.fixture
def sent_emails():
    with patch("bookline.domain.bookings.service.send_cancelled_emails", AsyncMock()) as mock:
        yield mock


class TestCancelBooking:
    async def test_attendee_cancels_without_reason(self, client: AsyncClient, db, host, event_type, sent_emails):
        booking = make_booking(db, host, START, event_type=event_type)

        response = await client.post("/api/cancel", json={"uid": booking.uid})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Booking cancelled successfully"
        props = body["bookingCancelledEventProps"]
        assert props["booking"]["uid"] == booking.uid
        assert props["booking"]["startTime"] == "2030-01-07T09:00:00.000Z"
        assert props["organizer"] == {"name": "Hannah Host", "email": "host@example.com", "timeZone": "Europe/Berlin"}
        assert props["eventType"]["slug"] == "intro-call"

        db.refresh(booking)
        assert booking.status == BookingStatus.CANCELLED.value
        sent_emails.assert_awaited_once()
        assert sent_emails.await_args.kwargs["attendees"][0]["email"] == "ada@example.com"

    async def test_host_must_give_reason(self, client: AsyncClient, db, host, sent_emails):
        booking = make_booking(db, host, START)

        response = await client.post("/api/cancel", json={"uid": booking.uid}, headers=auth_headers(host))

        assert response.status_code == 400
        db.refresh(booking)
        assert booking.status == BookingStatus.ACCEPTED.value

    async def test_host_cancels_with_reason(self, client: AsyncClient, db, host, sent_emails):
        booking = make_booking(db, host, START)

        response = await client.post(
            "/api/cancel",
            json={"uid": booking.uid, "cancellationReason": "  Sick today "},
            headers=auth_headers(host),
        )

        assert response.status_code == 200
        assert response.json()["bookingCancelledEventProps"]["booking"]["cancellationReason"] == "Sick today"
        db.refresh(booking)
        assert booking.cancellation_reason == "Sick today"
        assert booking.cancelled_by == "host@example.com"

    async def test_already_cancelled(self, client: AsyncClient, db, host, sent_emails):
        booking = make_booking(db, host, START, status=BookingStatus.CANCELLED.value)

        response = await client.post("/api/cancel", json={"uid": booking.uid})

        assert response.status_code == 400
        assert response.json()["detail"] == "This booking has already been cancelled"
        sent_emails.assert_not_awaited()

    async def test_unknown_booking(self, client: AsyncClient, sent_emails):
        response = await client.post("/api/cancel", json={"uid": "does-not-exist"})

        assert response.status_code == 404

    async def test_numeric_id_is_rejected(self, client: AsyncClient, sent_emails):
        response = await client.post("/api/cancel", json={"uid": "42"})

        assert response.status_code == 422

    async def test_email_failure_does_not_fail_cancellation(self, client: AsyncClient, db, host):
        booking = make_booking(db, host, START)

        with patch(
            "bookline.domain.bookings.service.send_cancelled_emails",
            AsyncMock(side_effect=RuntimeError("smtp down")),
        ):
            response = await client.post("/api/cancel", json={"uid": booking.uid})

        assert response.status_code == 200
        db.refresh(booking)
        assert booking.status == BookingStatus.CANCELLED.value


class TestRecurringAndSeats:
    async def test_all_remaining_occurrences(self, client: AsyncClient, db, host, sent_emails):
        past = make_booking(db, host, utc_now() - timedelta(days=7), recurring_event_id="series-1")
        first = make_booking(db, host, START, recurring_event_id="series-1")
        second = make_booking(db, host, START + timedelta(days=7), recurring_event_id="series-1")

        response = await client.post("/api/cancel", json={"uid": first.uid, "allRemainingBookings": True})

        assert response.status_code == 200
        for booking in (past, first, second):
            db.refresh(booking)
        assert first.status == BookingStatus.CANCELLED.value
        assert second.status == BookingStatus.CANCELLED.value
        assert past.status == BookingStatus.ACCEPTED.value

    async def test_cancel_single_seat(self, client: AsyncClient, db, host, sent_emails):
        booking = make_booking(
            db, host, START, attendees=[("Ada", "ada@example.com"), ("Bob", "bob@example.com")]
        )
        bob = next(a for a in booking.attendees if a.email == "bob@example.com")
        seat = BookingSeat(booking_id=booking.id, attendee_id=bob.id, reference_uid="seat-bob")
        db.add(seat)
        db.commit()

        response = await client.post("/api/cancel", json={"uid": booking.uid, "seatReferenceUid": "seat-bob"})

        assert response.status_code == 200
        db.refresh(booking)
        assert booking.status == BookingStatus.ACCEPTED.value
        assert [a.email for a in db.query(Attendee).filter(Attendee.booking_id == booking.id)] == [
            "ada@example.com"
        ]
        assert sent_emails.await_args.kwargs["attendees"] == [
            {"name": "Bob", "email": "bob@example.com", "locale": None}
        ]

    async def test_unknown_seat(self, client: AsyncClient, db, host, sent_emails):
        booking = make_booking(db, host, START)

        response = await client.post("/api/cancel", json={"uid": booking.uid, "seatReferenceUid": "nope"})

        assert response.status_code == 404


class TestReminders:
    async def test_scheduled_reminders_are_cancelled(self, client: AsyncClient, db, host, sent_emails):
        booking = make_booking(db, host, START)
        sms = WorkflowReminder(
            booking_uid=booking.uid,
            method=WorkflowMethods.SMS.value,
            scheduled_date=START - timedelta(hours=1),
            reference_id="SM123",
            scheduled=True,
        )
        email = WorkflowReminder(
            booking_uid=booking.uid,
            method=WorkflowMethods.EMAIL.value,
            scheduled_date=START - timedelta(hours=1),
            scheduled=True,
        )
        db.add_all([sms, email])
        db.commit()

        with patch("bookline.domain.workflows.twilio_provider.cancel_sms", AsyncMock()) as cancel_sms:
            response = await client.post("/api/cancel", json={"uid": booking.uid})

        assert response.status_code == 200
        cancel_sms.assert_awaited_once_with("SM123")
        reminders = db.query(WorkflowReminder).filter(WorkflowReminder.booking_uid == booking.uid).all()
        assert all(r.cancelled and not r.scheduled for r in reminders)
        assert db.query(Booking).filter(Booking.uid == booking.uid).one().status == BookingStatus.CANCELLED.value
