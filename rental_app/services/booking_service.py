import logging
import uuid
from typing import List, Optional

from core.check_permission import CheckRolePermission
from core.errors import ValidationError
from core.event_publish import EventPublisher, event_publisher
from core.transaction import transition
from models.enums import UserRole
from models.models import Booking
from repos.booking_repo import BookingRepo
from repos.property_repo import PropertyRepo

logger = logging.getLogger(__name__)


class BookingService:
    def __init__(self, db, publisher: EventPublisher | None = None):
        self.db = db
        self.repo: BookingRepo = BookingRepo(db)
        self.property_repo: PropertyRepo = PropertyRepo(db)
        self.publisher: EventPublisher = publisher or event_publisher
        self.permission: CheckRolePermission = CheckRolePermission()

    async def list_for_user(self, current_user) -> List[Booking]:
        if current_user.role == UserRole.ADMIN:
            return await self.repo.list_all()
        if current_user.role == UserRole.OWNER:
            owned = {p.id for p in await self.property_repo.list_by_owner(current_user.id)}
            return [b for b in await self.repo.list_all() if b.property_id in owned]
        return await self.repo.list_for_renter(current_user.id)

    async def _ensure_single_active(self, property_id, exclude_id=None):
        others = [
            booking
            for booking in await self.repo.active_for_property(property_id)
            if booking.id != exclude_id
        ]
        if others:
            raise ValidationError(
                "This property already has an active booking.",
                details={
                    "property_id": str(property_id),
                    "booking_ids": [str(b.id) for b in others],
                },
            )

    async def add_booking(self, current_user, data: dict) -> Booking:
        occupants = data.pop("occupants", None) or []
        property_id = data["property_id"]

        prop = await self.property_repo.get_by_id(property_id)
        if not prop:
            raise ValidationError(
                "Property not found.", details={"property_id": str(property_id)}
            )
        await self.permission.check_property_owner(current_user, prop)

        is_active = data.get("is_active", True)
        if is_active:
            await self._ensure_single_active(prop.id)

        async with transition(self.db, "add booking"):
            booking = await self.repo.create(occupants=occupants, **data)
            if is_active:
                await self.property_repo.mark_occupied(
                    prop, booking.renter_id, booking.start_date, booking.end_date
                )

        await self.publisher.publish(
            "booking.created",
            {"booking_id": str(booking.id), "property_id": str(prop.id)},
        )
        return booking

    async def update_booking(
        self, current_user, booking_id: uuid.UUID, data: dict
    ) -> Optional[Booking]:
        booking = await self.repo.get_by_id(booking_id)
        if not booking:
            return None

        prop = await self.property_repo.get_by_id(booking.property_id)
        await self.permission.check_property_owner(current_user, prop)

        occupants = data.pop("occupants", None)
        data.pop("property_id", None)
        was_active = booking.is_active
        will_be_active = data.get("is_active", was_active)

        if will_be_active and not was_active:
            await self._ensure_single_active(booking.property_id, exclude_id=booking.id)

        async with transition(self.db, "update booking"):
            await self.repo.stage(booking, **data)
            if occupants is not None:
                await self.repo.replace_occupants(booking, occupants)

            if prop is not None and will_be_active:
                await self.property_repo.mark_occupied(
                    prop, booking.renter_id, booking.start_date, booking.end_date
                )
            elif prop is not None and was_active:
                remaining = [
                    b
                    for b in await self.repo.active_for_property(prop.id)
                    if b.id != booking.id
                ]
                if not remaining:
                    await self.property_repo.release(prop)

        await self.publisher.publish(
            "booking.updated",
            {"booking_id": str(booking.id), "property_id": str(booking.property_id)},
        )
        return booking
