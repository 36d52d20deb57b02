from enum import Enum


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    OWNER = "OWNER"
    RENTER = "RENTER"


class VerificationStatus(str, Enum):
    UNVERIFIED = "UNVERIFIED"
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


class ChannelState(int, Enum):
    UNVERIFIED = 0
    VERIFIED = 1
    REQUESTED = 2


class VerificationChannel(str, Enum):
    EMAIL = "email"
    PHONE = "phone"
    ID = "id"


class GatedAction(str, Enum):
    APPLY = "APPLY"
    POST_PROPERTY = "POST_PROPERTY"
    BOOK = "BOOK"


class PropertyStatus(str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"


class ApplicationStatus(str, Enum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    LEASE_SIGNED = "lease_signed"
    ACTIVE = "active"


TERMINAL_APPLICATION_STATUSES = frozenset(
    {ApplicationStatus.REJECTED, ApplicationStatus.CANCELLED}
)


class BillType(str, Enum):
    RENT = "rent"
    UTILITY = "utility"
    OTHER = "other"


class BillStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"


class NotificationType(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    ALERT = "alert"


class FeedItemKind(str, Enum):
    PERSISTED = "persisted"
    SYNTHETIC = "synthetic"


PROPERTY_STATUS_ALIASES = {
    "available": PropertyStatus.AVAILABLE,
    "vacant": PropertyStatus.AVAILABLE,
    "free": PropertyStatus.AVAILABLE,
    "open": PropertyStatus.AVAILABLE,
    "listed": PropertyStatus.AVAILABLE,
    "occupied": PropertyStatus.OCCUPIED,
    "rented": PropertyStatus.OCCUPIED,
    "leased": PropertyStatus.OCCUPIED,
    "taken": PropertyStatus.OCCUPIED,
    "reserved": PropertyStatus.OCCUPIED,
    "maintenance": PropertyStatus.MAINTENANCE,
    "under maintenance": PropertyStatus.MAINTENANCE,
    "under_maintenance": PropertyStatus.MAINTENANCE,
    "repair": PropertyStatus.MAINTENANCE,
    "repairs": PropertyStatus.MAINTENANCE,
    "renovation": PropertyStatus.MAINTENANCE,
    "unavailable": PropertyStatus.MAINTENANCE,
}

BILL_TYPE_ALIASES = {
    "rent": BillType.RENT,
    "utility": BillType.UTILITY,
    "utilities": BillType.UTILITY,
    "other": BillType.OTHER,
}
