"""Pure rules deciding whether a user may take a gated marketplace action.

Nothing here touches the database or caches results; callers pass the
profile they already hold and get a decision back.
"""

from dataclasses import dataclass
from typing import Optional

from core.errors import VerificationGateError
from models.enums import ChannelState, GatedAction, UserRole, VerificationStatus

ACTION_PHRASES = {
    GatedAction.APPLY: ("apply for properties", "applying for properties"),
    GatedAction.POST_PROPERTY: ("post properties", "posting properties"),
    GatedAction.BOOK: ("book properties", "booking properties"),
}

POSTING_ROLES = frozenset({UserRole.OWNER, UserRole.ADMIN})


@dataclass(frozen=True)
class GateDecision:
    allowed: bool
    reason: Optional[str] = None


def _channel_value(value) -> int:
    if value is None:
        return ChannelState.UNVERIFIED.value
    if isinstance(value, bool):
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError):
        return ChannelState.UNVERIFIED.value


def _id_status(value) -> VerificationStatus:
    if isinstance(value, VerificationStatus):
        return value
    try:
        return VerificationStatus(str(value).upper())
    except ValueError:
        return VerificationStatus.UNVERIFIED


def composite(email_verified, phone_verified, id_status) -> bool:
    return (
        _channel_value(email_verified) == ChannelState.VERIFIED
        and _channel_value(phone_verified) == ChannelState.VERIFIED
        and _id_status(id_status) == VerificationStatus.VERIFIED
    )


def is_fully_verified(user) -> bool:
    if user is None:
        return False
    return composite(user.email_verified, user.phone_verified, user.id_status)


def verification_summary(user) -> dict:
    email = _channel_value(user.email_verified)
    phone = _channel_value(user.phone_verified)
    id_status = _id_status(user.id_status)
    return {
        "email": email == ChannelState.VERIFIED,
        "email_pending": email == ChannelState.REQUESTED,
        "phone": phone == ChannelState.VERIFIED,
        "phone_pending": phone == ChannelState.REQUESTED,
        "id": id_status == VerificationStatus.VERIFIED,
        "id_pending": id_status == VerificationStatus.PENDING,
        "fully_verified": composite(email, phone, id_status),
    }


def can_perform(user, action: GatedAction) -> GateDecision:
    action = GatedAction(action)
    infinitive, gerund = ACTION_PHRASES[action]

    if user is None:
        return GateDecision(False, f"Please login to {infinitive}")

    if action == GatedAction.POST_PROPERTY and user.role not in POSTING_ROLES:
        return GateDecision(False, "Only property owners can post properties")

    if _channel_value(user.email_verified) != ChannelState.VERIFIED:
        return GateDecision(
            False,
            "Please request email verification and wait for admin approval "
            f"before {gerund}.",
        )

    if not is_fully_verified(user):
        return GateDecision(
            False,
            f"Your account needs to be verified before {gerund}. "
            "Please complete your profile verification.",
        )

    return GateDecision(True)


def ensure_can_perform(user, action: GatedAction) -> None:
    decision = can_perform(user, action)
    if not decision.allowed:
        raise VerificationGateError(
            decision.reason, details={"action": GatedAction(action).value}
        )
