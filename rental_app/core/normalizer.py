import re
from enum import Enum

from models.enums import (
    BILL_TYPE_ALIASES,
    PROPERTY_STATUS_ALIASES,
    BillType,
    PropertyStatus,
)


def normalize_token(value) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        value = value.value

    cleaned = str(value).strip().lower()
    cleaned = cleaned.replace("-", " ")
    cleaned = re.sub(r"\s+", " ", cleaned)
    return cleaned


def normalize_property_status(value) -> PropertyStatus:
    """Map any stored or submitted status string onto a PropertyStatus.

    Unknown and empty values fall back to AVAILABLE.
    """
    if isinstance(value, PropertyStatus):
        return value

    token = normalize_token(value)
    if token in PROPERTY_STATUS_ALIASES:
        return PROPERTY_STATUS_ALIASES[token]

    underscored = token.replace(" ", "_")
    if underscored in PROPERTY_STATUS_ALIASES:
        return PROPERTY_STATUS_ALIASES[underscored]

    return PropertyStatus.AVAILABLE


def normalize_bill_type(value) -> BillType:
    if isinstance(value, BillType):
        return value
    return BILL_TYPE_ALIASES.get(normalize_token(value), BillType.OTHER)


def normalize_property_category(value) -> str:
    token = normalize_token(value).replace(" ", "_")
    if not token:
        return "apartment"
    if token == "boarding_house":
        return "other"
    return token
