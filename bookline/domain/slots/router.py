"""Slots router - FastAPI endpoints for available slots and reservations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_optional_user
from ...database import get_db
from ...enums import SlotFormat
from ...models import User
from .reservation_service import SlotReservationService
from .schemas import ReserveSlotInput

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v2/slots", tags=["Slots"])


def get_slot_service(db: Session = Depends(get_db)) -> SlotReservationService:
    """Dependency injection for SlotReservationService"""
    return SlotReservationService(db)


@router.get("")
async def get_available_slots(
    eventTypeId: int = Query(..., description="Event type to get slots for"),
    start: str = Query(..., description="ISO 8601 start of the range"),
    end: str = Query(..., description="ISO 8601 end of the range"),
    timeZone: Optional[str] = Query(None, description="Return slots in this time zone"),
    duration: Optional[int] = Query(None, gt=0, description="Slot length for variable length event types"),
    format: Optional[SlotFormat] = Query(None, description="time (default) or range"),
    service: SlotReservationService = Depends(get_slot_service),
):
    """Get available slots of an event type"""
    data = service.get_slots(eventTypeId, start, end, timeZone, duration, format)
    return {"status": "success", "data": data}


@router.post("/reservations", status_code=201)
async def reserve_slot(
    data: ReserveSlotInput,
    user: Optional[User] = Depends(get_optional_user),
    service: SlotReservationService = Depends(get_slot_service),
):
    """Reserve a slot so nobody else can book it for a few minutes"""
    return {"status": "success", "data": service.reserve_slot(data, user)}


@router.get("/reservations/{uid}")
async def get_reserved_slot(uid: str, service: SlotReservationService = Depends(get_slot_service)):
    """Get a slot reservation"""
    return {"status": "success", "data": service.get_reservation(uid)}


@router.delete("/reservations/{uid}")
async def delete_reserved_slot(uid: str, service: SlotReservationService = Depends(get_slot_service)):
    """Release a slot reservation"""
    service.delete_reservation(uid)
    return {"status": "success"}
