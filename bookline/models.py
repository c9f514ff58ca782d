import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base
from .enums import BookingStatus, MembershipRole, SmsCreditAllocationType


def generate_uid():
    """Generate a unique public ID for bookings and reservations"""
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=True)
    username = Column(String(255), nullable=True)
    locale = Column(String(10), nullable=True)
    time_zone = Column(String(64), default="Europe/London", nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    memberships = relationship("Membership", back_populates="user", cascade="all, delete-orphan")


class Team(Base):
    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=True, unique=True)
    # Monthly SMS overage budget in cents; 0 means no overage allowed
    sms_overage_limit = Column(Integer, default=0, nullable=False)
    sms_credit_allocation_type = Column(
        String(20), default=SmsCreditAllocationType.SPECIFIC.value, nullable=False
    )
    sms_credit_allocation_value = Column(Integer, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    members = relationship("Membership", back_populates="team", cascade="all, delete-orphan")
    sms_credit_counts = relationship("SmsCreditCount", back_populates="team")


class Membership(Base):
    __tablename__ = "memberships"
    __table_args__ = (UniqueConstraint("user_id", "team_id", name="uq_membership_user_team"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    team_id = Column(Integer, ForeignKey("teams.id"), nullable=False)
    role = Column(String(20), default=MembershipRole.MEMBER.value, nullable=False)
    accepted = Column(Boolean, default=False, nullable=False)
    # Attribute name -> value(s), used by routing form attribute rules
    attributes = Column(JSON, default=dict, nullable=True)

    user = relationship("User", back_populates="memberships")
    team = relationship("Team", back_populates="members")


class EventType(Base):
    __tablename__ = "event_types"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False)
    length = Column(Integer, nullable=False)  # minutes
    slot_interval = Column(Integer, nullable=True)  # minutes between slot starts, defaults to length
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    team_id = Column(Integer, ForeignKey("teams.id"), nullable=True)
    # {"timeZone": "Europe/Berlin", "days": [0, 1, 2, 3, 4], "startTime": "09:00", "endTime": "17:00"}
    availability = Column(JSON, nullable=True)
    # Per-app settings under "apps": {"plausible": {"enabled": true, ...}}
    event_metadata = Column("metadata", JSON, default=dict, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    owner = relationship("User")
    team = relationship("Team")


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    uid = Column(String(255), unique=True, index=True, nullable=False, default=generate_uid)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    start_time = Column(DateTime, nullable=False)  # UTC
    end_time = Column(DateTime, nullable=False)  # UTC
    status = Column(String(20), default=BookingStatus.ACCEPTED.value, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    event_type_id = Column(Integer, ForeignKey("event_types.id"), nullable=True)
    recurring_event_id = Column(String(255), nullable=True, index=True)
    cancellation_reason = Column(Text, nullable=True)
    cancelled_by = Column(String(255), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User")
    event_type = relationship("EventType")
    attendees = relationship("Attendee", back_populates="booking", cascade="all, delete-orphan")
    seats = relationship("BookingSeat", back_populates="booking", cascade="all, delete-orphan")


class Attendee(Base):
    __tablename__ = "attendees"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    time_zone = Column(String(64), default="UTC", nullable=False)
    phone_number = Column(String(32), nullable=True)
    locale = Column(String(10), nullable=True)

    booking = relationship("Booking", back_populates="attendees")


class BookingSeat(Base):
    __tablename__ = "booking_seats"

    id = Column(Integer, primary_key=True, index=True)
    reference_uid = Column(String(255), unique=True, nullable=False, default=generate_uid)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False)
    attendee_id = Column(Integer, ForeignKey("attendees.id"), nullable=False)

    booking = relationship("Booking", back_populates="seats")
    attendee = relationship("Attendee")


class SelectedSlot(Base):
    """A temporary hold on a slot while the booker completes the booking form"""

    __tablename__ = "selected_slots"

    id = Column(Integer, primary_key=True, index=True)
    uid = Column(String(255), unique=True, index=True, nullable=False, default=generate_uid)
    event_type_id = Column(Integer, ForeignKey("event_types.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    slot_utc_start_date = Column(DateTime, nullable=False)
    slot_utc_end_date = Column(DateTime, nullable=False)
    release_at = Column(DateTime, nullable=False)
    is_seat = Column(Boolean, default=False, nullable=False)


class Credential(Base):
    """Installed third-party app credential (key is encrypted app data)"""

    __tablename__ = "credentials"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String(255), nullable=False)
    key = Column(JSON, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    team_id = Column(Integer, ForeignKey("teams.id"), nullable=True)
    app_id = Column(String(255), nullable=True)
    invalid = Column(Boolean, default=False)
    created_at = Column(DateTime, server_default=func.now())


class RoutingForm(Base):
    __tablename__ = "routing_forms"

    id = Column(String(36), primary_key=True, default=generate_uid)
    name = Column(String(255), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    team_id = Column(Integer, ForeignKey("teams.id"), nullable=True)
    fields = Column(JSON, default=list, nullable=True)
    routes = Column(JSON, default=list, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    team = relationship("Team")
