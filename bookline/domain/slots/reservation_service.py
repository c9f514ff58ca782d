"""Slot reservation service - business logic for holding and listing slots"""

import logging
from datetime import timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...enums import SlotFormat
from ...models import EventType, User
from ...shared.dates import get_zone, parse_iso, to_naive_utc, utc_now
from .availability import get_available_slots
from .repository import BusyTimesRepository, EventTypeRepository, SelectedSlotRepository
from .schemas import GetReservedSlotOutput, ReserveSlotInput, ReserveSlotOutput
from .service import SlotsOutputService

logger = logging.getLogger(__name__)


class SlotReservationService:
    """Service layer for available slots and slot reservations"""

    def __init__(self, db: Session):
        self.db = db
        self.event_types = EventTypeRepository()
        self.reservations = SelectedSlotRepository()
        self.busy_times = BusyTimesRepository()
        self.output = SlotsOutputService(db)

    def _get_event_type(self, event_type_id: int) -> EventType:
        event_type = self.event_types.get_event_type_by_id(self.db, event_type_id)
        if not event_type:
            raise HTTPException(status_code=404, detail=f"Event type with id={event_type_id} not found")
        return event_type

    def get_slots(
        self,
        event_type_id: int,
        start: str,
        end: str,
        time_zone: Optional[str] = None,
        duration: Optional[int] = None,
        format: Optional[SlotFormat] = None,
    ):
        """Available slots of an event type, shaped as times or ranges"""
        event_type = self._get_event_type(event_type_id)
        try:
            range_start = to_naive_utc(parse_iso(start))
            range_end = to_naive_utc(parse_iso(end))
        except (ValueError, OverflowError) as e:
            raise HTTPException(status_code=400, detail="start and end must be ISO 8601 dates") from e
        if range_end <= range_start:
            raise HTTPException(status_code=400, detail="end must be after start")
        if time_zone:
            try:
                get_zone(time_zone)
            except ValueError as e:
                raise HTTPException(
                    status_code=400,
                    detail=f"Could not adjust timezone for slot {start} with timezone {time_zone}",
                ) from e

        now = utc_now()
        bookings = self.busy_times.get_busy_bookings(self.db, event_type, range_start, range_end)
        held = self.reservations.get_active_reservations(
            self.db, event_type.id, range_start, range_end, now
        )
        busy = [(b.start_time, b.end_time) for b in bookings] + [
            (s.slot_utc_start_date, s.slot_utc_end_date) for s in held
        ]

        try:
            available = get_available_slots(
                event_type,
                range_start,
                range_end,
                busy,
                now,
                duration=duration,
                output_time_zone=time_zone,
            )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        logger.debug(
            f"📅 {sum(len(v) for v in available['slots'].values())} slots for event type {event_type.id}"
        )
        return self.output.get_output_slots(
            available,
            duration=duration,
            event_type_id=event_type.id,
            format=format,
            time_zone=time_zone,
        )

    def reserve_slot(self, data: ReserveSlotInput, user: Optional[User] = None) -> ReserveSlotOutput:
        """Hold a slot for data.reservationDuration minutes"""
        event_type = self._get_event_type(data.eventTypeId)

        slot_start = to_naive_utc(parse_iso(data.slotStart))
        slot_end = slot_start + timedelta(minutes=data.slotDuration or event_type.length)
        now = utc_now()

        if self.busy_times.get_busy_bookings(self.db, event_type, slot_start, slot_end):
            raise HTTPException(status_code=409, detail="This slot is already booked")
        if self.reservations.get_active_reservations(self.db, event_type.id, slot_start, slot_end, now):
            raise HTTPException(status_code=409, detail="This slot is already reserved")

        slot = self.reservations.create(
            self.db,
            event_type_id=event_type.id,
            user_id=user.id if user else None,
            slot_utc_start_date=slot_start,
            slot_utc_end_date=slot_end,
            release_at=now + timedelta(minutes=data.reservationDuration),
        )
        logger.info(f"🔒 Slot {slot.uid} reserved for event type {event_type.id} until {slot.release_at}")
        return self.output.get_output_reserved_slot(slot, data.reservationDuration)

    def get_reservation(self, uid: str) -> GetReservedSlotOutput:
        slot = self.reservations.get_by_uid(self.db, uid)
        if not slot:
            raise HTTPException(status_code=404, detail=f"Reserved slot with uid={uid} not found")
        return self.output.get_output_slot(slot)

    def delete_reservation(self, uid: str) -> None:
        slot = self.reservations.get_by_uid(self.db, uid)
        if not slot:
            raise HTTPException(status_code=404, detail=f"Reserved slot with uid={uid} not found")
        self.reservations.delete(self.db, slot)
        logger.info(f"🔓 Slot reservation {uid} released")
