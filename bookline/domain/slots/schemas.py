"""Slot domain schemas - request and response bodies of the slots API"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...config import DEFAULT_RESERVATION_MINUTES
from ...shared.dates import parse_iso


class ReserveSlotInput(BaseModel):
    """Schema for reserving a slot"""

    eventTypeId: int = Field(
        ...,
        description="The ID of the event type for which booking should be reserved.",
        examples=[1],
    )
    slotStart: str = Field(
        ...,
        description="ISO 8601 datestring in UTC timezone representing available slot.",
        examples=["2024-09-04T09:00:00Z"],
    )
    slotDuration: Optional[int] = Field(
        None,
        description=(
            "By default slot duration is equal to event type length, but if you want to reserve a slot "
            "for an event type that has a variable length you can specify it here. If you don't have "
            "this set explicitly that event type can have one of many lengths you can omit this."
        ),
        examples=[30],
    )
    reservationDuration: int = Field(
        DEFAULT_RESERVATION_MINUTES,
        description=(
            "For how many minutes the slot should be reserved - for this long time noone else can book "
            "this event type at `start` time."
        ),
        examples=[5],
    )

    @field_validator("slotStart")
    @classmethod
    def validate_slot_start(cls, v):
        try:
            parse_iso(v)
        except (ValueError, OverflowError) as e:
            raise ValueError("slotStart must be a valid ISO 8601 date string") from e
        return v

    @field_validator("slotDuration", "reservationDuration")
    @classmethod
    def validate_positive(cls, v):
        if v is not None and v <= 0:
            raise ValueError("Duration must be a positive number of minutes")
        return v


class GetReservedSlotOutput(BaseModel):
    eventTypeId: int
    slotStart: str
    slotEnd: str
    slotDuration: int
    reservationUid: str
    reservationUntil: str


class ReserveSlotOutput(GetReservedSlotOutput):
    reservationDuration: int


class RangeSlot(BaseModel):
    start: str
    end: str


# date -> ISO start times
SlotsOutput = dict[str, list[str]]
# date -> {start, end}
RangeSlotsOutput = dict[str, list[RangeSlot]]
