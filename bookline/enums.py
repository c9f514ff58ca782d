"""String enums shared by models, schemas and services"""

from enum import Enum


class MembershipRole(str, Enum):
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


class BookingStatus(str, Enum):
    ACCEPTED = "ACCEPTED"
    PENDING = "PENDING"
    CANCELLED = "CANCELLED"
    REJECTED = "REJECTED"


class WorkflowMethods(str, Enum):
    EMAIL = "EMAIL"
    SMS = "SMS"
    WHATSAPP = "WHATSAPP"


class SmsCreditAllocationType(str, Enum):
    ALL = "ALL"
    NONE = "NONE"
    SPECIFIC = "SPECIFIC"


class SlotFormat(str, Enum):
    Time = "time"
    Range = "range"
