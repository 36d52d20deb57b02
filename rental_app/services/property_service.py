import logging
import uuid
from typing import List, Optional

from core.check_permission import CheckRolePermission
from core.errors import NotFoundError, ReferentialIntegrityError, ValidationError
from core.event_publish import EventPublisher, event_publisher
from core.normalizer import normalize_property_status
from core.settings import settings
from core.transaction import transition
from models.enums import GatedAction, PropertyStatus
from models.models import Property
from repos.property_repo import PropertyRepo
from services.verification_evaluator import ensure_can_perform

logger = logging.getLogger(__name__)

# Fields only the lifecycle transitions may write.
COORDINATOR_FIELDS = frozenset(
    {
        "status",
        "current_renter_id",
        "lease_start_date",
        "lease_end_date",
        "reserved_until",
        "owner_id",
        "id",
    }
)


class PropertyService:
    def __init__(self, db, publisher: EventPublisher | None = None):
        self.db = db
        self.repo: PropertyRepo = PropertyRepo(db)
        self.publisher: EventPublisher = publisher or event_publisher
        self.permission: CheckRolePermission = CheckRolePermission()

    async def list_properties(self, owner_id: uuid.UUID | None = None) -> List[Property]:
        if owner_id:
            return await self.repo.list_by_owner(owner_id)
        return await self.repo.list_all()

    async def get_property(self, property_id: uuid.UUID) -> Property:
        prop = await self.repo.get_by_id(property_id)
        if not prop:
            raise NotFoundError("Property not found.", details={"property_id": str(property_id)})
        return prop

    async def create_property(self, current_user, data: dict) -> Property:
        ensure_can_perform(current_user, GatedAction.POST_PROPERTY)

        status = normalize_property_status(data.pop("status", None))
        if status == PropertyStatus.OCCUPIED:
            logger.info("New property submitted as occupied; listing it as available")
            status = PropertyStatus.AVAILABLE

        values = {k: v for k, v in data.items() if k not in COORDINATOR_FIELDS}

        async with transition(self.db, "create property"):
            prop = await self.repo.create(owner_id=current_user.id, status=status, **values)

        await self.publisher.publish(
            "property.created",
            {"property_id": str(prop.id), "owner_id": str(current_user.id)},
        )
        return prop

    async def update_property(
        self, current_user, property_id: uuid.UUID, data: dict
    ) -> Optional[Property]:
        prop = await self.repo.get_by_id(property_id)
        if not prop:
            return None
        await self.permission.check_property_owner(current_user, prop)

        blocked = sorted(COORDINATOR_FIELDS.intersection(data))
        if blocked:
            raise ValidationError(
                "These fields are managed by the rental lifecycle and cannot be edited.",
                details={"fields": blocked},
            )

        async with transition(self.db, "update property"):
            await self.repo.stage(prop, **data)

        await self.publisher.publish(
            "property.updated",
            {"property_id": str(prop.id), "fields": sorted(data)},
        )
        return prop

    async def set_maintenance(
        self, current_user, property_id: uuid.UUID, on: bool
    ) -> Optional[Property]:
        prop = await self.repo.get_by_id(property_id)
        if not prop:
            return None
        await self.permission.check_property_owner(current_user, prop)

        if prop.status == PropertyStatus.OCCUPIED:
            raise ValidationError(
                f"{prop.title} is occupied and cannot go into maintenance.",
                details={"property_id": str(prop.id)},
            )

        target = PropertyStatus.MAINTENANCE if on else PropertyStatus.AVAILABLE
        if prop.status == target:
            return prop

        async with transition(self.db, "set maintenance"):
            await self.repo.stage(prop, status=target)

        await self.publisher.publish(
            "property.updated",
            {"property_id": str(prop.id), "status": target.value},
        )
        return prop

    async def delete_property(self, current_user, property_id: uuid.UUID) -> bool:
        prop = await self.repo.get_by_id(property_id)
        if not prop:
            return False
        await self.permission.check_property_owner(current_user, prop)

        summary = await self.repo.reference_summary(
            prop.id, sample_size=settings.DELETE_BLOCK_SAMPLE_SIZE
        )
        if (
            summary["bookings_count"]
            or summary["bills_count"]
            or summary["applications_count"]
        ):
            link = f"/property/{prop.id}"
            raise ReferentialIntegrityError(
                f"Cannot delete {prop.title}. This property has existing records "
                f"(Bookings: {summary['bookings_count']} | "
                f"Bills: {summary['bills_count']} | "
                f"Applications: {summary['applications_count']}). "
                f"Please settle/close them first. View: {link}",
                details={"property_id": str(prop.id), "link": link, **summary},
            )

        async with transition(self.db, "delete property"):
            await self.repo.delete(prop)

        await self.publisher.publish(
            "property.deleted", {"property_id": str(property_id)}
        )
        return True
