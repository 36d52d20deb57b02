import uuid

import pytest
from sqlalchemy import func, select

from core.errors import (
    DuplicateProfileError,
    PermissionDeniedError,
    ValidationError,
)
from models.enums import ChannelState, UserRole, VerificationStatus
from models.models import Notification
from services.account_service import REACTIVATION_TITLE, AccountService

FRONT = "https://res.cloudinary.com/demo/image/private/v1/ids/front.jpg"


@pytest.fixture
def service(db, publisher, auth_provider, storage):
    return AccountService(
        db, publisher=publisher, auth_provider=auth_provider, storage=storage
    )


async def _reactivation_requests(db):
    return (
        await db.execute(
            select(func.count(Notification.id)).where(
                Notification.title == REACTIVATION_TITLE
            )
        )
    ).scalar_one()


class TestCreateProfile:
    async def test_creates_renter_with_lowercased_email(self, service):
        user = await service.create_profile(uuid.uuid4(), "New.User@Example.com")
        assert user.email == "new.user@example.com"
        assert user.role == UserRole.RENTER
        assert user.is_verified == 0

    async def test_admin_cannot_self_register(self, service):
        with pytest.raises(PermissionDeniedError):
            await service.create_profile(uuid.uuid4(), "boss@example.com", role="admin")

    async def test_duplicate_email_is_reported(self, service):
        await service.create_profile(uuid.uuid4(), "twin@example.com")
        with pytest.raises(DuplicateProfileError):
            await service.create_profile(uuid.uuid4(), "Twin@Example.com")


class TestDeactivate:
    async def test_deactivation_resets_verification(
        self, service, make_user, auth_provider, storage, publisher
    ):
        admin = await make_user(role=UserRole.ADMIN)
        user = await make_user(id_document_url=FRONT, id_type="passport")

        result = await service.deactivate_account(admin, user.id)

        assert result.inactive == 1
        assert result.email_verified == ChannelState.UNVERIFIED
        assert result.phone_verified == ChannelState.UNVERIFIED
        assert result.id_status == VerificationStatus.UNVERIFIED
        assert result.is_verified == 0
        assert result.id_document_url is None
        assert storage.deleted == [FRONT]
        assert auth_provider.revoked == [user.id]
        assert publisher.names() == ["account.deactivated"]

    async def test_session_revocation_failure_is_not_fatal(
        self, db, publisher, storage, failing_auth_provider, make_user
    ):
        service = AccountService(
            db,
            publisher=publisher,
            auth_provider=failing_auth_provider,
            storage=storage,
        )
        admin = await make_user(role=UserRole.ADMIN)
        user = await make_user()

        result = await service.deactivate_account(admin, user.id)

        assert result.inactive == 1

    async def test_admin_cannot_deactivate_self(self, service, make_user):
        admin = await make_user(role=UserRole.ADMIN)
        with pytest.raises(ValidationError):
            await service.deactivate_account(admin, admin.id)

    async def test_reactivation_keeps_channels_reset(self, db, service, make_user):
        admin = await make_user(role=UserRole.ADMIN)
        user = await make_user()
        await service.deactivate_account(admin, user.id)

        result = await service.reactivate_account(admin, user.id)

        assert result.inactive == 0
        assert result.is_verified == 0
        titles = (
            await db.execute(
                select(Notification.title).where(Notification.user_id == user.id)
            )
        ).scalars().all()
        assert titles == ["Account Reactivated"]


class TestReactivationRequest:
    async def test_one_alert_per_admin_and_no_duplicates(self, db, service, make_user):
        first_admin = await make_user(role=UserRole.ADMIN)
        second_admin = await make_user(role=UserRole.ADMIN)
        user = await make_user(email="gone@example.com", inactive=1)

        assert await service.request_reactivation("Gone@Example.com") is True
        assert await _reactivation_requests(db) == 2

        assert await service.request_reactivation("gone@example.com") is True
        assert await _reactivation_requests(db) == 2

        recipients = set(
            (
                await db.execute(
                    select(Notification.user_id).where(
                        Notification.title == REACTIVATION_TITLE
                    )
                )
            ).scalars().all()
        )
        assert recipients == {first_admin.id, second_admin.id}
        links = set(
            (
                await db.execute(
                    select(Notification.link).where(
                        Notification.title == REACTIVATION_TITLE
                    )
                )
            ).scalars().all()
        )
        assert links == {f"/?tab=users&user={user.id}"}

    async def test_disallowed_request_is_refused(self, db, service, make_user):
        await make_user(role=UserRole.ADMIN)
        await make_user(
            email="blocked@example.com", inactive=1, allow_reactivation_request=0
        )

        with pytest.raises(PermissionDeniedError):
            await service.request_reactivation("blocked@example.com")
        assert await _reactivation_requests(db) == 0

    async def test_active_account_cannot_request(self, service, make_user):
        await make_user(email="here@example.com")
        with pytest.raises(ValidationError):
            await service.request_reactivation("here@example.com")

    async def test_toggle_allows_requests_again(self, db, service, make_user):
        admin = await make_user(role=UserRole.ADMIN)
        user = await make_user(
            email="later@example.com", inactive=1, allow_reactivation_request=0
        )

        await service.set_reactivation_allowed(admin, user.id, True)

        assert await service.request_reactivation("later@example.com") is True
        assert await _reactivation_requests(db) == 1
