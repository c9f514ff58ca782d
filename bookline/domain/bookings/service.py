"""Booking service - Business logic for cancelling bookings"""

import asyncio
import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...email_service import send_cancelled_emails
from ...enums import BookingStatus, WorkflowMethods
from ...i18n import get_translation
from ...models import Booking, User
from ...models_workflows import WorkflowReminder
from ...shared.dates import UTC, to_iso, utc_now
from ..workflows import twilio_provider as twilio
from .repository import BookingRepository
from .schemas import CancelBookingRequest, CancelBookingResponse, CancelledBookingProps

logger = logging.getLogger(__name__)


def _serialize_booking(booking: Booking) -> dict:
    return {
        "id": booking.id,
        "uid": booking.uid,
        "title": booking.title,
        "startTime": to_iso(booking.start_time, UTC),
        "endTime": to_iso(booking.end_time, UTC),
        "status": booking.status,
        "recurringEventId": booking.recurring_event_id,
        "attendees": [
            {"name": a.name, "email": a.email, "timeZone": a.time_zone} for a in booking.attendees
        ],
    }


class BookingCancellationService:
    """Service layer for booking cancellation"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BookingRepository()

    async def cancel_booking(
        self, data: CancelBookingRequest, current_user: Optional[User] = None
    ) -> CancelBookingResponse:
        """
        Cancel a booking, a single seat of it, or all remaining occurrences of a recurring booking.
        """
        t = get_translation(current_user.locale if current_user else "en", "common")

        booking = self.repo.get_booking_by_uid(self.db, data.uid)
        if not booking:
            raise HTTPException(status_code=404, detail="Booking not found")
        if booking.status == BookingStatus.CANCELLED.value:
            raise HTTPException(status_code=400, detail=t("booking_already_cancelled"))

        is_host = current_user is not None and current_user.id == booking.user_id
        reason = (data.cancellationReason or "").strip()
        if is_host and not reason:
            raise HTTPException(status_code=400, detail=t("cancellation_reason_required"))

        cancelled_by = data.cancelledBy or (current_user.email if current_user else None)
        organizer = {
            "name": booking.user.name if booking.user else "",
            "email": booking.user.email if booking.user else "",
            "timeZone": booking.user.time_zone if booking.user else "UTC",
            "locale": booking.user.locale if booking.user else None,
        }

        if data.seatReferenceUid:
            return await self._cancel_seat(booking, data.seatReferenceUid, reason, organizer, t)

        bookings = [booking]
        if data.allRemainingBookings and booking.recurring_event_id:
            remaining = self.repo.get_remaining_recurring_bookings(
                self.db, booking.recurring_event_id, utc_now()
            )
            bookings = remaining if any(b.id == booking.id for b in remaining) else [booking, *remaining]

        try:
            self.repo.mark_cancelled(self.db, bookings, reason or None, cancelled_by)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to cancel booking {booking.uid}: {e}")
            raise HTTPException(
                status_code=500,
                detail=f"{t('error_with_status_code_occured', status=500)} {t('please_try_again')}",
            ) from e

        logger.info(f"🗑️ Cancelled {len(bookings)} booking(s) starting with {booking.uid}")

        await self.cancel_workflow_reminders([b.uid for b in bookings])

        await self._notify(
            booking,
            organizer,
            [{"name": a.name, "email": a.email, "locale": a.locale} for a in booking.attendees],
            reason,
        )

        cancelled_booking = {**_serialize_booking(booking), "cancellationReason": reason}
        return CancelBookingResponse(
            success=True,
            message=t("booking_cancelled"),
            bookingCancelledEventProps=CancelledBookingProps(
                booking=cancelled_booking,
                organizer={k: organizer[k] for k in ("name", "email", "timeZone")},
                eventType=self._serialize_event_type(booking),
            ),
        )

    async def _cancel_seat(
        self, booking: Booking, seat_reference_uid: str, reason: str, organizer: dict, t
    ) -> CancelBookingResponse:
        """Remove one attendee's seat; the booking stays for everyone else"""
        seat = self.repo.get_seat(self.db, booking.id, seat_reference_uid)
        if not seat:
            raise HTTPException(status_code=404, detail="Seat not found")

        attendee = {"name": seat.attendee.name, "email": seat.attendee.email, "locale": seat.attendee.locale}
        self.repo.delete_seat(self.db, seat)
        self.db.refresh(booking)
        logger.info(f"💺 Seat {seat_reference_uid} removed from booking {booking.uid}")

        await self._notify(booking, organizer, [attendee], reason)

        return CancelBookingResponse(
            success=True,
            message=t("booking_cancelled"),
            bookingCancelledEventProps=CancelledBookingProps(
                booking={**_serialize_booking(booking), "cancellationReason": reason},
                organizer={k: organizer[k] for k in ("name", "email", "timeZone")},
                eventType=self._serialize_event_type(booking),
            ),
        )

    async def cancel_workflow_reminders(self, booking_uids: list[str]) -> None:
        """Cancel every pending reminder of the given bookings"""
        reminders = self.repo.get_active_reminders(self.db, booking_uids)

        async def _cancel(reminder: WorkflowReminder) -> None:
            is_sms = reminder.method in (WorkflowMethods.SMS.value, WorkflowMethods.WHATSAPP.value)
            if is_sms and reminder.reference_id:
                try:
                    await twilio.cancel_sms(reminder.reference_id)
                except twilio.TwilioError as e:
                    logger.error(f"❌ Could not cancel SMS reminder {reminder.id}: {e}")
            reminder.cancelled = True
            reminder.scheduled = False

        await asyncio.gather(*(_cancel(reminder) for reminder in reminders))
        self.db.commit()

    @staticmethod
    def _serialize_event_type(booking: Booking) -> Optional[dict]:
        if not booking.event_type:
            return None
        return {
            "id": booking.event_type.id,
            "title": booking.event_type.title,
            "slug": booking.event_type.slug,
            "length": booking.event_type.length,
        }

    @staticmethod
    async def _notify(booking: Booking, organizer: dict, attendees: list[dict], reason: str) -> None:
        try:
            await send_cancelled_emails(
                title=booking.title,
                start=to_iso(booking.start_time, UTC),
                organizer=organizer,
                attendees=attendees,
                cancellation_reason=reason or None,
            )
        except Exception as e:
            logger.error(f"❌ Failed to send cancellation emails for booking {booking.uid}: {e}")
