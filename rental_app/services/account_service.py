import logging
import uuid
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from core.auth_provider import AuthProviderClient, auth_provider as default_auth_provider
from core.check_permission import CheckRolePermission
from core.document_storage import DocumentStorage, document_storage as default_storage
from core.errors import (
    DuplicateProfileError,
    PermissionDeniedError,
    PersistenceError,
    ValidationError,
)
from core.event_publish import EventPublisher, event_publisher
from core.transaction import transition
from core.validate_enum import validate_enum
from models.enums import ChannelState, NotificationType, UserRole, VerificationStatus
from models.models import User
from repos.notification_repo import NotificationRepo
from repos.profile_repo import ProfileRepo
from services.notifier import Notifier

logger = logging.getLogger(__name__)

REACTIVATION_TITLE = "Account Reactivation Request"


class AccountService:
    def __init__(
        self,
        db,
        publisher: EventPublisher | None = None,
        auth_provider: AuthProviderClient | None = None,
        storage: DocumentStorage | None = None,
    ):
        self.db = db
        self.repo: ProfileRepo = ProfileRepo(db)
        self.notification_repo: NotificationRepo = NotificationRepo(db)
        self.notifier: Notifier = Notifier(db)
        self.publisher: EventPublisher = publisher or event_publisher
        self.auth_provider: AuthProviderClient = auth_provider or default_auth_provider
        self.storage: DocumentStorage = storage or default_storage
        self.permission: CheckRolePermission = CheckRolePermission()

    async def list_users(self, current_user):
        await self.permission.check_admin(current_user)
        return await self.repo.list_all()

    async def create_profile(
        self,
        user_id: uuid.UUID,
        email: str,
        full_name: str = "",
        phone: Optional[str] = None,
        role=UserRole.RENTER,
    ) -> User:
        role = validate_enum(role, UserRole, field="role")
        if role == UserRole.ADMIN:
            raise PermissionDeniedError("Admin accounts cannot be self-registered.")

        try:
            return await self.repo.create(
                id=user_id,
                email=email.strip().lower(),
                full_name=full_name,
                phone=phone,
                role=role,
            )
        except IntegrityError as e:
            logger.info("Duplicate profile for %s", email)
            raise DuplicateProfileError(
                "A profile with this account or email already exists.",
                details={"email": email},
            ) from e
        except SQLAlchemyError as e:
            logger.exception("Failed to create profile for %s", email)
            raise PersistenceError("Could not create the profile.") from e

    async def deactivate_account(self, current_user, user_id: uuid.UUID) -> Optional[User]:
        await self.permission.check_admin(current_user)
        if current_user.id == user_id:
            raise ValidationError("You cannot deactivate your own account.")

        user = await self.repo.get_by_id(user_id)
        if not user:
            return None

        documents = [user.id_document_url, user.id_document_back_url]

        async with transition(self.db, "deactivate account"):
            await self.repo.stage(
                user,
                inactive=1,
                email_verified=ChannelState.UNVERIFIED.value,
                phone_verified=ChannelState.UNVERIFIED.value,
                id_status=VerificationStatus.UNVERIFIED,
                is_verified=0,
                id_document_url=None,
                id_document_back_url=None,
                id_type=None,
            )

        if any(documents):
            await self.storage.safe_delete(*documents)

        try:
            await self.auth_provider.revoke_sessions(user.id)
        except Exception:
            logger.exception("Failed to revoke sessions after deactivating %s", user.id)

        await self.publisher.publish("account.deactivated", {"user_id": str(user.id)})
        return user

    async def reactivate_account(self, current_user, user_id: uuid.UUID) -> Optional[User]:
        await self.permission.check_admin(current_user)
        user = await self.repo.get_by_id(user_id)
        if not user:
            return None
        if not user.inactive:
            return user

        async with transition(self.db, "reactivate account"):
            await self.repo.stage(user, inactive=0)

        await self.notifier.send(
            user.id,
            "Account Reactivated",
            "Your account has been reactivated. Please verify your email, phone and identity again.",
            NotificationType.SUCCESS,
            "/settings",
        )
        await self.publisher.publish("account.reactivated", {"user_id": str(user.id)})
        return user

    async def set_reactivation_allowed(
        self, current_user, user_id: uuid.UUID, allowed: bool
    ) -> Optional[User]:
        await self.permission.check_admin(current_user)
        user = await self.repo.get_by_id(user_id)
        if not user:
            return None

        async with transition(self.db, "set reactivation allowed"):
            await self.repo.stage(user, allow_reactivation_request=1 if allowed else 0)
        return user

    async def request_reactivation(self, email: str) -> bool:
        """Ask every admin to reactivate the inactive account behind ``email``.

        Returns True when a request is (or already was) waiting for review.
        """
        user = await self.repo.get_by_email(email)
        if not user or not user.inactive:
            raise ValidationError("Only deactivated accounts can request reactivation.")
        if not user.allow_reactivation_request:
            raise PermissionDeniedError(
                "Reactivation requests are disabled for this account. Please contact an administrator."
            )

        link = f"/?tab=users&user={user.id}"
        existing = await self.notification_repo.find_unread(REACTIVATION_TITLE, link)
        if existing:
            logger.info("Reactivation already requested for %s", user.id)
            return True

        admins = await self.repo.list_admins()
        if not admins:
            raise PersistenceError("No administrator is available to review the request.")

        async with transition(self.db, "request reactivation"):
            for admin in admins:
                await self.notification_repo.create(
                    user_id=admin.id,
                    title=REACTIVATION_TITLE,
                    message=(
                        "A user requested account reactivation. "
                        f"Email: {user.email}. User ID: {user.id}"
                    ),
                    type=NotificationType.ALERT,
                    link=link,
                )
        return True
