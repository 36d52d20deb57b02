import logging
import uuid
from typing import Optional

from core.auth_provider import AuthProviderClient, auth_provider as default_auth_provider
from core.check_permission import CheckRolePermission
from core.document_storage import DocumentStorage, document_storage as default_storage
from core.errors import NotFoundError, ValidationError
from core.event_publish import EventPublisher, event_publisher
from core.transaction import transition
from core.validate_enum import validate_enum
from models.enums import (
    ChannelState,
    NotificationType,
    VerificationChannel,
    VerificationStatus,
)
from models.models import User
from repos.profile_repo import ProfileRepo
from services.notifier import Notifier
from services.verification_evaluator import composite, verification_summary

logger = logging.getLogger(__name__)

DECISION_MESSAGES = {
    VerificationChannel.EMAIL: {
        "approved": (
            "Email Verification Approved",
            "Your email address has been verified by an administrator.",
        ),
        "rejected": (
            "Email Verification Rejected",
            "Your email verification was rejected. Please ensure your email "
            "address is correct and request verification again.",
        ),
        "link": "/settings",
    },
    VerificationChannel.PHONE: {
        "approved": (
            "Phone Verification Approved",
            "Your phone number has been verified by an administrator.",
        ),
        "rejected": (
            "Phone Verification Rejected",
            "Your phone verification was rejected. Please ensure your phone "
            "number is correct and request verification again.",
        ),
        "link": "/settings",
    },
    VerificationChannel.ID: {
        "approved": (
            "Verification Approved!",
            "Your identity verification has been approved. You can now access all features.",
        ),
        "rejected": (
            "Verification Rejected",
            "Your identity verification was rejected. Please review your "
            "submitted documents and try again.",
        ),
        "link": "/profile?tab=verification",
    },
}


class VerificationService:
    def __init__(
        self,
        db,
        publisher: EventPublisher | None = None,
        auth_provider: AuthProviderClient | None = None,
        storage: DocumentStorage | None = None,
    ):
        self.db = db
        self.repo: ProfileRepo = ProfileRepo(db)
        self.notifier: Notifier = Notifier(db)
        self.publisher: EventPublisher = publisher or event_publisher
        self.auth_provider: AuthProviderClient = auth_provider or default_auth_provider
        self.storage: DocumentStorage = storage or default_storage
        self.permission: CheckRolePermission = CheckRolePermission()

    @staticmethod
    def _with_composite(user: User, **changes) -> dict:
        """Add the recomputed ``is_verified`` flag to a channel change."""
        email = changes.get("email_verified", user.email_verified)
        phone = changes.get("phone_verified", user.phone_verified)
        id_status = changes.get("id_status", user.id_status)
        changes["is_verified"] = 1 if composite(email, phone, id_status) else 0
        return changes

    async def _notify_admins(self, user: User, title: str, message: str, link: str):
        admins = await self.repo.list_admins()
        await self.notifier.send_many(
            [admin.id for admin in admins], title, message, NotificationType.INFO, link
        )

    async def _published(self, user_id, channel, decision):
        await self.publisher.publish(
            "verification.updated",
            {"user_id": str(user_id), "channel": channel.value, "decision": decision},
        )

    async def summary(self, current_user, user_id: uuid.UUID) -> dict:
        await self.permission.check_self_or_admin(current_user, user_id)
        user = await self.repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found.")
        return verification_summary(user)

    async def request_email_verification(self, current_user) -> User:
        if current_user.email_verified == ChannelState.VERIFIED:
            return current_user
        if current_user.email_verified == ChannelState.REQUESTED:
            return current_user

        async with transition(self.db, "request email verification"):
            await self.repo.stage(
                current_user,
                **self._with_composite(
                    current_user, email_verified=ChannelState.REQUESTED.value
                ),
            )

        name = current_user.full_name or "A user"
        await self._notify_admins(
            current_user,
            "New Email Verification Submitted",
            f"{name} has requested email verification. Please review and approve or reject.",
            f"/?tab=users&user={current_user.id}",
        )
        await self._published(current_user.id, VerificationChannel.EMAIL, "requested")
        return current_user

    async def request_phone_verification(
        self, current_user, phone: Optional[str] = None
    ) -> User:
        phone = (phone or current_user.phone or "").strip()
        if not phone:
            raise ValidationError("Add a phone number before requesting verification.")
        if (
            current_user.phone_verified == ChannelState.VERIFIED
            and phone == current_user.phone
        ):
            return current_user

        async with transition(self.db, "request phone verification"):
            await self.repo.stage(
                current_user,
                **self._with_composite(
                    current_user,
                    phone=phone,
                    phone_verified=ChannelState.REQUESTED.value,
                ),
            )

        name = current_user.full_name or "A user"
        await self._notify_admins(
            current_user,
            "New Phone Verification Submitted",
            f"{name} has requested phone number verification. Please review and verify the phone number.",
            f"/?tab=users&user={current_user.id}",
        )
        await self._published(current_user.id, VerificationChannel.PHONE, "requested")
        return current_user

    async def request_id_verification(
        self,
        current_user,
        document_url: str,
        back_url: Optional[str] = None,
        id_type: Optional[str] = None,
    ) -> User:
        if not (document_url or "").strip():
            raise ValidationError("An identity document is required.")
        if current_user.id_status == VerificationStatus.VERIFIED:
            raise ValidationError("Your identity is already verified.")
        if current_user.id_status == VerificationStatus.PENDING:
            raise ValidationError("Your identity documents are already under review.")

        async with transition(self.db, "request id verification"):
            await self.repo.stage(
                current_user,
                **self._with_composite(
                    current_user,
                    id_status=VerificationStatus.PENDING,
                    id_document_url=document_url.strip(),
                    id_document_back_url=back_url,
                    id_type=id_type,
                ),
            )

        name = current_user.full_name or "A user"
        await self._notify_admins(
            current_user,
            "New ID Verification Submitted",
            f"{name} has submitted ID documents for verification. Please review and approve or reject.",
            f"/?tab=verifications&user={current_user.id}",
        )
        await self._published(current_user.id, VerificationChannel.ID, "requested")
        return current_user

    async def document_links(self, current_user, user_id: uuid.UUID) -> dict:
        await self.permission.check_self_or_admin(current_user, user_id)
        user = await self.repo.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found.")
        return {
            "front": self.storage.signed_url(user.id_document_url)
            if user.id_document_url
            else None,
            "back": self.storage.signed_url(user.id_document_back_url)
            if user.id_document_back_url
            else None,
        }

    async def approve_verification(
        self, current_user, channel, user_id: uuid.UUID
    ) -> Optional[User]:
        return await self._decide(current_user, channel, user_id, approved=True)

    async def reject_verification(
        self, current_user, channel, user_id: uuid.UUID, reason: Optional[str] = None
    ) -> Optional[User]:
        return await self._decide(
            current_user, channel, user_id, approved=False, reason=reason
        )

    async def _decide(
        self,
        current_user,
        channel,
        user_id: uuid.UUID,
        approved: bool,
        reason: Optional[str] = None,
    ) -> Optional[User]:
        await self.permission.check_admin(current_user)
        channel = validate_enum(channel, VerificationChannel, field="channel")

        user = await self.repo.get_by_id(user_id)
        if not user:
            logger.info("Verification decision for unknown user %s ignored", user_id)
            return None

        removed_documents = []
        if channel == VerificationChannel.EMAIL:
            state = ChannelState.VERIFIED if approved else ChannelState.UNVERIFIED
            changes = {"email_verified": state.value}
        elif channel == VerificationChannel.PHONE:
            state = ChannelState.VERIFIED if approved else ChannelState.UNVERIFIED
            changes = {"phone_verified": state.value}
        elif approved:
            changes = {"id_status": VerificationStatus.VERIFIED}
        else:
            removed_documents = [user.id_document_url, user.id_document_back_url]
            changes = {
                "id_status": VerificationStatus.REJECTED,
                "id_document_url": None,
                "id_document_back_url": None,
            }

        async with transition(self.db, f"{channel.value} verification decision"):
            await self.repo.stage(user, **self._with_composite(user, **changes))

        if any(removed_documents):
            await self.storage.safe_delete(*removed_documents)

        if approved and channel == VerificationChannel.EMAIL:
            try:
                await self.auth_provider.confirm_email(user.id)
            except Exception:
                logger.exception("Failed to confirm email with auth provider for %s", user.id)

        messages = DECISION_MESSAGES[channel]
        title, default_message = messages["approved" if approved else "rejected"]
        message = default_message
        if not approved and reason and reason.strip():
            message = reason.strip()
        await self.notifier.send(
            user.id,
            title,
            message,
            NotificationType.SUCCESS if approved else NotificationType.ALERT,
            messages["link"],
        )
        await self._published(user.id, channel, "approved" if approved else "rejected")
        return user
