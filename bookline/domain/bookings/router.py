"""Booking router - the cancellation endpoint used by the booking page"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_optional_user
from ...database import get_db
from ...models import User
from .schemas import CancelBookingRequest, CancelBookingResponse
from .service import BookingCancellationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Bookings"])


def get_cancellation_service(db: Session = Depends(get_db)) -> BookingCancellationService:
    """Dependency injection for BookingCancellationService"""
    return BookingCancellationService(db)


@router.post("/cancel", response_model=CancelBookingResponse)
async def cancel_booking(
    data: CancelBookingRequest,
    current_user: Optional[User] = Depends(get_optional_user),
    service: BookingCancellationService = Depends(get_cancellation_service),
):
    """Cancel a booking; hosts must give a reason, attendees may leave it empty"""
    return await service.cancel_booking(data, current_user)
