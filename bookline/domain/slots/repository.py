"""Slot repository - Database operations for event types, bookings and reservations"""

from datetime import datetime
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...enums import BookingStatus
from ...models import Booking, EventType, SelectedSlot


class EventTypeRepository:
    """Repository for event type lookups"""

    @staticmethod
    def get_event_type_by_id(db: Session, event_type_id: int) -> Optional[EventType]:
        return db.query(EventType).filter(EventType.id == event_type_id).first()


class SelectedSlotRepository:
    """Repository for slot reservations"""

    @staticmethod
    def get_by_uid(db: Session, uid: str) -> Optional[SelectedSlot]:
        return db.query(SelectedSlot).filter(SelectedSlot.uid == uid).first()

    @staticmethod
    def create(db: Session, **slot_data) -> SelectedSlot:
        slot = SelectedSlot(**slot_data)
        db.add(slot)
        db.commit()
        db.refresh(slot)
        return slot

    @staticmethod
    def delete(db: Session, slot: SelectedSlot) -> None:
        db.delete(slot)
        db.commit()

    @staticmethod
    def get_active_reservations(
        db: Session,
        event_type_id: int,
        start: datetime,
        end: datetime,
        now: datetime,
    ) -> list[SelectedSlot]:
        """Unexpired reservations of an event type overlapping [start, end)"""
        return (
            db.query(SelectedSlot)
            .filter(
                SelectedSlot.event_type_id == event_type_id,
                SelectedSlot.release_at > now,
                SelectedSlot.slot_utc_start_date < end,
                SelectedSlot.slot_utc_end_date > start,
            )
            .all()
        )

    @staticmethod
    def delete_expired(db: Session, now: datetime) -> int:
        deleted = (
            db.query(SelectedSlot)
            .filter(SelectedSlot.release_at <= now)
            .delete(synchronize_session=False)
        )
        db.commit()
        return deleted


class BusyTimesRepository:
    """Bookings that block slots of an event type"""

    @staticmethod
    def get_busy_bookings(
        db: Session, event_type: EventType, start: datetime, end: datetime
    ) -> list[Booking]:
        owner_filter = Booking.event_type_id == event_type.id
        if event_type.user_id:
            owner_filter = or_(owner_filter, Booking.user_id == event_type.user_id)

        return (
            db.query(Booking)
            .filter(
                owner_filter,
                Booking.status.in_([BookingStatus.ACCEPTED.value, BookingStatus.PENDING.value]),
                Booking.start_time < end,
                Booking.end_time > start,
            )
            .order_by(Booking.start_time)
            .all()
        )
