"""Booking repository - Database operations for bookings and their reminders"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...enums import BookingStatus
from ...models import Attendee, Booking, BookingSeat
from ...models_workflows import WorkflowReminder


class BookingRepository:
    """Repository for booking database operations"""

    @staticmethod
    def get_booking_by_uid(db: Session, uid: str) -> Optional[Booking]:
        return (
            db.query(Booking)
            .options(
                joinedload(Booking.attendees),
                joinedload(Booking.user),
                joinedload(Booking.event_type),
            )
            .filter(Booking.uid == uid)
            .first()
        )

    @staticmethod
    def get_remaining_recurring_bookings(
        db: Session, recurring_event_id: str, now: datetime
    ) -> list[Booking]:
        """Future, not yet cancelled occurrences of a recurring booking"""
        return (
            db.query(Booking)
            .filter(
                Booking.recurring_event_id == recurring_event_id,
                Booking.start_time >= now,
                Booking.status != BookingStatus.CANCELLED.value,
            )
            .order_by(Booking.start_time)
            .all()
        )

    @staticmethod
    def get_seat(db: Session, booking_id: int, reference_uid: str) -> Optional[BookingSeat]:
        return (
            db.query(BookingSeat)
            .options(joinedload(BookingSeat.attendee))
            .filter(BookingSeat.booking_id == booking_id, BookingSeat.reference_uid == reference_uid)
            .first()
        )

    @staticmethod
    def delete_seat(db: Session, seat: BookingSeat) -> None:
        attendee = db.query(Attendee).filter(Attendee.id == seat.attendee_id).first()
        db.delete(seat)
        if attendee:
            db.delete(attendee)
        db.commit()

    @staticmethod
    def mark_cancelled(
        db: Session,
        bookings: list[Booking],
        cancellation_reason: Optional[str],
        cancelled_by: Optional[str],
    ) -> None:
        for booking in bookings:
            booking.status = BookingStatus.CANCELLED.value
            booking.cancellation_reason = cancellation_reason
            booking.cancelled_by = cancelled_by
        db.commit()

    @staticmethod
    def get_active_reminders(db: Session, booking_uids: list[str]) -> list[WorkflowReminder]:
        return (
            db.query(WorkflowReminder)
            .filter(
                WorkflowReminder.booking_uid.in_(booking_uids),
                WorkflowReminder.cancelled.is_(False),
            )
            .all()
        )
