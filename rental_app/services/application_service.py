import logging
import uuid
from datetime import date
from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from core.check_permission import CheckRolePermission
from core.date_helper import calculate_lease_end, today
from core.errors import PersistenceError, ValidationError
from core.event_publish import EventPublisher, event_publisher
from core.transaction import transition
from core.validate_enum import validate_enum
from models.enums import (
    TERMINAL_APPLICATION_STATUSES,
    ApplicationStatus,
    GatedAction,
    NotificationType,
    UserRole,
)
from models.models import Application
from repos.application_repo import ApplicationRepo
from repos.booking_repo import BookingRepo
from repos.property_repo import PropertyRepo
from services.notifier import Notifier
from services.verification_evaluator import ensure_can_perform

logger = logging.getLogger(__name__)

# Statuses under which the renter holds the unit.
OCCUPYING_STATUSES = frozenset(
    {
        ApplicationStatus.APPROVED,
        ApplicationStatus.LEASE_SIGNED,
        ApplicationStatus.ACTIVE,
    }
)


class ApplicationService:
    def __init__(self, db, publisher: EventPublisher | None = None):
        self.db = db
        self.repo: ApplicationRepo = ApplicationRepo(db)
        self.property_repo: PropertyRepo = PropertyRepo(db)
        self.booking_repo: BookingRepo = BookingRepo(db)
        self.notifier: Notifier = Notifier(db)
        self.publisher: EventPublisher = publisher or event_publisher
        self.permission: CheckRolePermission = CheckRolePermission()

    async def list_for_user(self, current_user) -> List[Application]:
        if current_user.role == UserRole.ADMIN:
            return await self.repo.list_all()
        if current_user.role == UserRole.OWNER:
            owned = await self.property_repo.list_by_owner(current_user.id)
            return await self.repo.list_for_properties(p.id for p in owned)
        return await self.repo.list_for_renter(current_user.id)

    async def submit_application(
        self,
        current_user,
        property_id: uuid.UUID,
        message: Optional[str] = None,
        move_in_date: Optional[date] = None,
    ) -> Application:
        ensure_can_perform(current_user, GatedAction.APPLY)

        prop = await self.property_repo.get_by_id(property_id)
        if not prop:
            raise ValidationError(
                "Property not found.", details={"property_id": str(property_id)}
            )

        latest = await self.repo.latest_for_pair(prop.id, current_user.id)
        if latest and latest.status == ApplicationStatus.PENDING:
            logger.info(
                "Skipping duplicate application by %s for property %s",
                current_user.id,
                prop.id,
            )
            return latest

        application = None
        async with transition(self.db, "submit application"):
            try:
                async with self.db.begin_nested():
                    application = await self.repo.create(
                        property_id=prop.id,
                        renter_id=current_user.id,
                        status=ApplicationStatus.PENDING,
                        message=message,
                        move_in_date=move_in_date,
                        monthly_rent=prop.monthly_rent or prop.price,
                        security_deposit=prop.security_deposit,
                    )
            except IntegrityError:
                logger.info(
                    "Concurrent application by %s for property %s hit the pending index",
                    current_user.id,
                    prop.id,
                )

        if application is None:
            latest = await self.repo.latest_for_pair(prop.id, current_user.id)
            if latest and latest.status == ApplicationStatus.PENDING:
                return latest
            raise PersistenceError(
                "Could not complete submit application. No changes were saved.",
                details={"operation": "submit application"},
            )

        await self.notifier.send(
            prop.owner_id,
            "New Application",
            "You received a new rental application.",
            NotificationType.INFO,
            "/?section=applications",
        )
        await self.publisher.publish(
            "application.submitted",
            {
                "application_id": str(application.id),
                "property_id": str(prop.id),
                "renter_id": str(current_user.id),
            },
        )
        return application

    async def _authorize(self, current_user, application, prop, new_status):
        if (
            new_status == ApplicationStatus.CANCELLED
            and current_user.id == application.renter_id
        ):
            return
        await self.permission.check_property_owner(current_user, prop)

    async def process_application(
        self,
        current_user,
        application_id: uuid.UUID,
        new_status,
        reason: Optional[str] = None,
    ) -> Optional[Application]:
        new_status = validate_enum(new_status, ApplicationStatus, field="status")

        application = await self.repo.get_by_id(application_id)
        if not application:
            logger.info("process_application: no application %s", application_id)
            return None

        prop = await self.property_repo.get_by_id(application.property_id)
        await self._authorize(current_user, application, prop, new_status)

        previous = application.status
        if previous in TERMINAL_APPLICATION_STATUSES:
            raise ValidationError(
                f"This application was {previous.value} and can no longer change.",
                details={"status": previous.value},
            )
        if new_status == previous:
            return application
        if new_status == ApplicationStatus.LEASE_SIGNED:
            raise ValidationError("Signing a lease requires a lease start date.")
        if (
            new_status == ApplicationStatus.ACTIVE
            and previous != ApplicationStatus.LEASE_SIGNED
        ):
            raise ValidationError("Only a signed lease can become active.")

        cleaned_reason = (reason or "").strip()
        if new_status == ApplicationStatus.REJECTED and not cleaned_reason:
            raise ValidationError("A reason is required to reject an application.")

        entering = (
            new_status == ApplicationStatus.APPROVED
            and previous not in OCCUPYING_STATUSES
        )
        leaving = previous in OCCUPYING_STATUSES and new_status not in OCCUPYING_STATUSES

        if entering and prop is not None:
            occupied_by_other = [
                booking
                for booking in await self.booking_repo.active_for_property(prop.id)
                if booking.renter_id != application.renter_id
            ]
            if occupied_by_other:
                raise ValidationError(
                    f"{prop.title} already has an active booking.",
                    details={"property_id": str(prop.id)},
                )

        renter_id = application.renter_id
        property_id = application.property_id

        async with transition(self.db, "process application"):
            values = {"status": new_status}
            if cleaned_reason:
                values["owner_notes"] = cleaned_reason

            if leaving:
                await self._release(property_id, renter_id, prop)
                values["lease_start_date"] = None
                values["lease_end_date"] = None

            if entering:
                start = today()
                end = calculate_lease_end(start)
                await self._occupy(property_id, renter_id, prop, start, end)
                values["lease_start_date"] = start
                values["lease_end_date"] = end

            await self.repo.stage(application, **values)

        title = prop.title if prop else "the property"
        if new_status == ApplicationStatus.APPROVED:
            await self.notifier.send(
                renter_id,
                "Application Approved",
                f"Your application for {title} has been approved.",
                NotificationType.SUCCESS,
                f"/property/{property_id}",
            )
        elif new_status == ApplicationStatus.REJECTED:
            await self.notifier.send(
                renter_id,
                "Application Rejected",
                cleaned_reason,
                NotificationType.ALERT,
                f"/property/{property_id}",
            )

        await self.publisher.publish(
            "application.status_changed",
            {
                "application_id": str(application_id),
                "property_id": str(property_id),
                "renter_id": str(renter_id),
                "from": previous.value,
                "to": new_status.value,
            },
        )
        return application

    async def _occupy(self, property_id, renter_id, prop, start, end):
        booking = await self.booking_repo.latest_for_pair(property_id, renter_id)
        if booking:
            await self.booking_repo.stage(
                booking, is_active=True, start_date=start, end_date=end
            )
        else:
            await self.booking_repo.create(
                property_id=property_id,
                renter_id=renter_id,
                start_date=start,
                end_date=end,
                is_active=True,
            )
        if prop is not None:
            await self.property_repo.mark_occupied(prop, renter_id, start, end)

    async def _release(self, property_id, renter_id, prop):
        for booking in await self.booking_repo.active_for_pair(property_id, renter_id):
            await self.booking_repo.stage(booking, is_active=False)
        if prop is not None:
            await self.property_repo.release(prop)

    async def set_lease_start(
        self, current_user, application_id: uuid.UUID, start_date: date
    ) -> Optional[Application]:
        application = await self.repo.get_by_id(application_id)
        if not application:
            logger.info("set_lease_start: no application %s", application_id)
            return None

        prop = await self.property_repo.get_by_id(application.property_id)
        await self.permission.check_property_owner(current_user, prop)

        if application.status != ApplicationStatus.APPROVED:
            raise ValidationError(
                "Only approved applications can have a lease start date.",
                details={"status": application.status.value},
            )

        end_date = calculate_lease_end(start_date)
        renter_id = application.renter_id
        property_id = application.property_id

        async with transition(self.db, "set lease start"):
            bookings = await self.booking_repo.active_for_pair(property_id, renter_id)
            if bookings:
                for booking in bookings:
                    await self.booking_repo.stage(
                        booking, start_date=start_date, end_date=end_date
                    )
            else:
                await self.booking_repo.create(
                    property_id=property_id,
                    renter_id=renter_id,
                    start_date=start_date,
                    end_date=end_date,
                    is_active=True,
                )
            if prop is not None:
                await self.property_repo.mark_occupied(
                    prop, renter_id, start_date, end_date
                )
            await self.repo.stage(
                application,
                status=ApplicationStatus.LEASE_SIGNED,
                lease_start_date=start_date,
                lease_end_date=end_date,
            )

        await self.publisher.publish(
            "application.status_changed",
            {
                "application_id": str(application_id),
                "property_id": str(property_id),
                "renter_id": str(renter_id),
                "from": ApplicationStatus.APPROVED.value,
                "to": ApplicationStatus.LEASE_SIGNED.value,
                "lease_start_date": start_date.isoformat(),
                "lease_end_date": end_date.isoformat(),
            },
        )
        return application
