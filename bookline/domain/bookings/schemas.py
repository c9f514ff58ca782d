"""Booking domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_email


class CancelBookingRequest(BaseModel):
    """Schema for cancelling a booking (or one seat of it)"""

    uid: str
    cancellationReason: Optional[str] = ""
    allRemainingBookings: bool = False
    seatReferenceUid: Optional[str] = None
    cancelledBy: Optional[str] = None

    @field_validator("uid")
    @classmethod
    def validate_uid(cls, v):
        # Bookings must be cancelled by uid, never by their sequential id
        if not v or v.strip().isdigit():
            raise ValueError("Bookings are cancelled by uid")
        return v.strip()

    @field_validator("cancelledBy")
    @classmethod
    def validate_cancelled_by(cls, v):
        if v:
            return validate_email(v)
        return v


class CancelledBookingProps(BaseModel):
    """Payload the booking page forwards to embeds as the bookingCancelled event"""

    booking: dict
    organizer: dict
    eventType: Optional[dict] = None


class CancelBookingResponse(BaseModel):
    success: bool
    message: str
    bookingCancelledEventProps: CancelledBookingProps
