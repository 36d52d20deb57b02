from sqlalchemy import String
from sqlalchemy.types import TypeDecorator

from core.normalizer import normalize_bill_type, normalize_property_status


class PropertyStatusType(TypeDecorator):
    """Stores the lowercase status value and normalizes legacy synonyms on read."""

    impl = String(20)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return normalize_property_status(value).value

    def process_result_value(self, value, dialect):
        return normalize_property_status(value)


class BillTypeType(TypeDecorator):
    impl = String(20)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return normalize_bill_type(value).value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return normalize_bill_type(value)
