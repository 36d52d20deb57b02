import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

import phonenumbers
from pydantic import BaseModel, EmailStr, Field, field_validator

from core.normalizer import normalize_property_category
from models.enums import (
    ApplicationStatus,
    BillStatus,
    BillType,
    NotificationType,
    PropertyStatus,
    UserRole,
    VerificationStatus,
)


def _validate_phone(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    try:
        parsed = phonenumbers.parse(value, None)
    except phonenumbers.NumberParseException:
        raise ValueError("Invalid phone number format. Use e.g. +2348012345678")
    if not phonenumbers.is_valid_number(parsed):
        raise ValueError("Invalid phone number. Use full international format.")
    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)


class ProfileCreate(BaseModel):
    id: uuid.UUID
    email: EmailStr
    full_name: str = ""
    phone: Optional[str] = None
    role: UserRole = UserRole.RENTER

    @field_validator("full_name", mode="before")
    @classmethod
    def clean_name(cls, value):
        return (value or "").strip()

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, value):
        return _validate_phone(value)


class UserOut(BaseModel):
    id: uuid.UUID
    email: str
    full_name: str
    phone: Optional[str] = None
    role: UserRole
    email_verified: int
    phone_verified: int
    id_status: VerificationStatus
    is_verified: int
    inactive: int
    allow_reactivation_request: int
    id_type: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class VerificationSummaryOut(BaseModel):
    email: bool
    email_pending: bool
    phone: bool
    phone_pending: bool
    id: bool
    id_pending: bool
    fully_verified: bool


class PhoneVerificationRequest(BaseModel):
    phone: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, value):
        return _validate_phone(value)


class IdVerificationRequest(BaseModel):
    document_url: str = Field(min_length=1)
    back_url: Optional[str] = None
    id_type: Optional[str] = Field(default=None, max_length=60)


class VerificationDecision(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=1000)


class DocumentLinksOut(BaseModel):
    front: Optional[str] = None
    back: Optional[str] = None


class ReactivationRequest(BaseModel):
    email: EmailStr


class ReactivationToggle(BaseModel):
    allowed: bool


class PropertyCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    address: str = Field(min_length=1, max_length=255)
    price: Decimal = Field(ge=0)
    bedrooms: int = Field(default=0, ge=0)
    bathrooms: int = Field(default=0, ge=0)
    sqft: Optional[int] = Field(default=None, ge=0)
    image: Optional[str] = None
    category: str = "apartment"
    status: Optional[str] = None
    available_date: Optional[date] = None
    security_deposit: Optional[Decimal] = Field(default=None, ge=0)
    monthly_rent: Optional[Decimal] = Field(default=None, ge=0)

    @field_validator("category", mode="before")
    @classmethod
    def clean_category(cls, value):
        return normalize_property_category(value)


class PropertyUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    address: Optional[str] = Field(default=None, min_length=1, max_length=255)
    price: Optional[Decimal] = Field(default=None, ge=0)
    bedrooms: Optional[int] = Field(default=None, ge=0)
    bathrooms: Optional[int] = Field(default=None, ge=0)
    sqft: Optional[int] = Field(default=None, ge=0)
    image: Optional[str] = None
    category: Optional[str] = None
    available_date: Optional[date] = None
    security_deposit: Optional[Decimal] = Field(default=None, ge=0)
    monthly_rent: Optional[Decimal] = Field(default=None, ge=0)

    # lifecycle-owned keys pass through so the service can refuse them by name
    model_config = {"extra": "allow"}

    @field_validator("category", mode="before")
    @classmethod
    def clean_category(cls, value):
        if value is None:
            return None
        return normalize_property_category(value)


class MaintenanceToggle(BaseModel):
    on: bool


class PropertyOut(BaseModel):
    id: uuid.UUID
    owner_id: uuid.UUID
    title: str
    description: Optional[str] = None
    address: str
    price: Decimal
    bedrooms: int
    bathrooms: int
    sqft: Optional[int] = None
    image: Optional[str] = None
    category: str
    status: PropertyStatus
    available_date: Optional[date] = None
    reserved_until: Optional[date] = None
    current_renter_id: Optional[uuid.UUID] = None
    lease_start_date: Optional[date] = None
    lease_end_date: Optional[date] = None
    security_deposit: Optional[Decimal] = None
    monthly_rent: Optional[Decimal] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ApplicationCreate(BaseModel):
    property_id: uuid.UUID
    message: Optional[str] = Field(default=None, max_length=2000)
    move_in_date: Optional[date] = None


class ApplicationProcess(BaseModel):
    status: str
    reason: Optional[str] = Field(default=None, max_length=1000)


class LeaseStart(BaseModel):
    start_date: date


class ApplicationOut(BaseModel):
    id: uuid.UUID
    property_id: uuid.UUID
    renter_id: uuid.UUID
    status: ApplicationStatus
    message: Optional[str] = None
    move_in_date: Optional[date] = None
    lease_start_date: Optional[date] = None
    lease_end_date: Optional[date] = None
    monthly_rent: Optional[Decimal] = None
    security_deposit: Optional[Decimal] = None
    owner_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class OccupantIn(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    relationship_to_renter: Optional[str] = Field(
        default=None, max_length=120, alias="relationship"
    )
    age: Optional[int] = Field(default=None, ge=0)
    contact: Optional[str] = None
    notes: Optional[str] = None
    dob: Optional[date] = None

    model_config = {"populate_by_name": True}


class OccupantOut(BaseModel):
    id: uuid.UUID
    name: str
    relationship_to_renter: Optional[str] = Field(
        default=None, serialization_alias="relationship"
    )
    age: Optional[int] = None
    contact: Optional[str] = None
    notes: Optional[str] = None
    dob: Optional[date] = None

    model_config = {"from_attributes": True}


class BookingCreate(BaseModel):
    property_id: uuid.UUID
    renter_id: uuid.UUID
    start_date: date
    end_date: Optional[date] = None
    is_active: bool = True
    notes: Optional[str] = None
    occupants: List[OccupantIn] = Field(default_factory=list)


class BookingUpdate(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: Optional[bool] = None
    notes: Optional[str] = None
    occupants: Optional[List[OccupantIn]] = None


class BookingOut(BaseModel):
    id: uuid.UUID
    property_id: uuid.UUID
    renter_id: uuid.UUID
    start_date: date
    end_date: Optional[date] = None
    is_active: bool
    notes: Optional[str] = None
    occupants: List[OccupantOut] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class BillCreate(BaseModel):
    property_id: uuid.UUID
    renter_id: uuid.UUID
    type: str = BillType.RENT.value
    amount: Decimal = Field(gt=0)
    due_date: date
    notes: Optional[str] = None


class BillOut(BaseModel):
    id: uuid.UUID
    property_id: uuid.UUID
    renter_id: uuid.UUID
    type: BillType
    amount: Decimal
    due_date: date
    status: BillStatus
    paid_date: Optional[datetime] = None
    notes: Optional[str] = None

    model_config = {"from_attributes": True}


class NotificationOut(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    message: str
    type: NotificationType
    link: str
    is_read: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class FeedItemOut(BaseModel):
    id: str
    kind: str
    title: str
    message: str
    type: NotificationType
    link: str
    is_read: bool
    created_at: Optional[datetime] = None
    source: dict = Field(default_factory=dict)


class FeedOut(BaseModel):
    items: List[FeedItemOut]
    unread_count: int


class CountOut(BaseModel):
    success: bool = True
    count: int = 0


class DeleteOut(BaseModel):
    success: bool = True
    deleted: bool
