from typing import Optional

from pydantic import BaseModel


class MatchingMember(BaseModel):
    id: int
    name: Optional[str] = None
    email: str


class UserBookingData(BaseModel):
    userId: int
    bookingsCount: int


class VirtualQueue(BaseModel):
    routeId: Optional[str] = None
    matchingMembers: list[MatchingMember]
    perUserData: list[UserBookingData]
