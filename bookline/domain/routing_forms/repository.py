"""Routing form repository - Database operations for forms, members and booking counts"""

from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ...enums import BookingStatus
from ...models import Booking, Membership, RoutingForm


class RoutingFormRepository:
    """Repository for routing form queries"""

    @staticmethod
    def get_form_by_id(db: Session, form_id: str) -> Optional[RoutingForm]:
        return db.query(RoutingForm).filter(RoutingForm.id == form_id).first()

    @staticmethod
    def get_accepted_members(db: Session, team_id: int) -> list[Membership]:
        return (
            db.query(Membership)
            .options(joinedload(Membership.user))
            .filter(Membership.team_id == team_id, Membership.accepted.is_(True))
            .order_by(Membership.id)
            .all()
        )

    @staticmethod
    def is_member(db: Session, team_id: int, user_id: int) -> bool:
        return (
            db.query(Membership.id)
            .filter(
                Membership.team_id == team_id,
                Membership.user_id == user_id,
                Membership.accepted.is_(True),
            )
            .first()
            is not None
        )

    @staticmethod
    def count_bookings_by_user(
        db: Session, user_ids: list[int], start: datetime, end: datetime
    ) -> dict[int, int]:
        if not user_ids:
            return {}
        rows = (
            db.query(Booking.user_id, func.count(Booking.id))
            .filter(
                Booking.user_id.in_(user_ids),
                Booking.status == BookingStatus.ACCEPTED.value,
                Booking.start_time >= start,
                Booking.start_time <= end,
            )
            .group_by(Booking.user_id)
            .all()
        )
        return {user_id: count for user_id, count in rows}
