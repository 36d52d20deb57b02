from enum import Enum
from typing import Type, TypeVar

from .errors import ValidationError

E = TypeVar("E", bound=Enum)


def validate_enum(
    value: str | Enum,
    enum_cls: Type[E],
    *,
    field: str,
) -> E:
    if isinstance(value, enum_cls):
        return value

    if isinstance(value, str):
        cleaned = value.strip()
        for candidate in (cleaned, cleaned.lower(), cleaned.upper()):
            try:
                return enum_cls(candidate)
            except ValueError:
                pass

        try:
            return enum_cls[cleaned.upper()]
        except KeyError:
            pass

    allowed = ", ".join(str(e.value) for e in enum_cls)
    raise ValidationError(
        f"Invalid {field}: {value}. Allowed values: {allowed}",
        details={"field": field},
    )
