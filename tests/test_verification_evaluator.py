from types import SimpleNamespace

import pytest

from core.errors import VerificationGateError
from models.enums import GatedAction, UserRole, VerificationStatus
from services.verification_evaluator import (
    can_perform,
    composite,
    ensure_can_perform,
    is_fully_verified,
    verification_summary,
)


def profile(role=UserRole.RENTER, email=1, phone=1, id_status=VerificationStatus.VERIFIED):
    return SimpleNamespace(
        role=role, email_verified=email, phone_verified=phone, id_status=id_status
    )


class TestComposite:
    def test_all_channels_verified(self):
        assert composite(1, 1, VerificationStatus.VERIFIED) is True

    @pytest.mark.parametrize(
        "email,phone,id_status",
        [
            (2, 1, VerificationStatus.VERIFIED),
            (1, 0, VerificationStatus.VERIFIED),
            (1, 1, VerificationStatus.PENDING),
            (None, 1, "VERIFIED"),
        ],
    )
    def test_any_missing_channel_fails(self, email, phone, id_status):
        assert composite(email, phone, id_status) is False

    def test_accepts_lowercase_id_status(self):
        assert composite(True, True, "verified") is True

    def test_none_user_is_not_verified(self):
        assert is_fully_verified(None) is False


class TestCanPerform:
    def test_anonymous_is_asked_to_login(self):
        decision = can_perform(None, GatedAction.APPLY)
        assert decision.allowed is False
        assert decision.reason == "Please login to apply for properties"

    def test_renter_cannot_post(self):
        decision = can_perform(profile(), GatedAction.POST_PROPERTY)
        assert decision.reason == "Only property owners can post properties"

    def test_email_check_comes_before_composite(self):
        decision = can_perform(profile(email=2, phone=0), GatedAction.BOOK)
        assert decision.reason == (
            "Please request email verification and wait for admin approval "
            "before booking properties."
        )

    def test_partial_verification_is_refused(self):
        decision = can_perform(
            profile(role=UserRole.OWNER, id_status=VerificationStatus.PENDING),
            GatedAction.POST_PROPERTY,
        )
        assert decision.reason == (
            "Your account needs to be verified before posting properties. "
            "Please complete your profile verification."
        )

    def test_fully_verified_owner_may_post(self):
        decision = can_perform(profile(role=UserRole.OWNER), GatedAction.POST_PROPERTY)
        assert decision.allowed is True
        assert decision.reason is None

    def test_admin_may_post(self):
        assert can_perform(profile(role=UserRole.ADMIN), "POST_PROPERTY").allowed


def test_ensure_can_perform_raises_gate_error():
    with pytest.raises(VerificationGateError) as exc:
        ensure_can_perform(None, GatedAction.BOOK)
    assert exc.value.status_code == 403
    assert exc.value.details == {"action": "BOOK"}


def test_summary_reports_pending_channels():
    summary = verification_summary(
        profile(email=2, phone=1, id_status=VerificationStatus.PENDING)
    )
    assert summary == {
        "email": False,
        "email_pending": True,
        "phone": True,
        "phone_pending": False,
        "id": False,
        "id_pending": True,
        "fully_verified": False,
    }
