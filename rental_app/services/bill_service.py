import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from core.check_permission import CheckRolePermission
from core.date_helper import today
from core.errors import PermissionDeniedError, ValidationError
from core.event_publish import EventPublisher, event_publisher
from core.normalizer import normalize_bill_type
from core.transaction import transition
from models.enums import BillStatus, NotificationType, UserRole
from models.models import Bill
from repos.bill_repo import BillRepo
from repos.property_repo import PropertyRepo
from services.notifier import Notifier

logger = logging.getLogger(__name__)


class BillService:
    def __init__(self, db, publisher: EventPublisher | None = None):
        self.db = db
        self.repo: BillRepo = BillRepo(db)
        self.property_repo: PropertyRepo = PropertyRepo(db)
        self.notifier: Notifier = Notifier(db)
        self.publisher: EventPublisher = publisher or event_publisher
        self.permission: CheckRolePermission = CheckRolePermission()

    async def list_for_user(self, current_user) -> List[Bill]:
        if current_user.role == UserRole.ADMIN:
            return await self.repo.list_all()
        if current_user.role == UserRole.OWNER:
            bills = []
            for prop in await self.property_repo.list_by_owner(current_user.id):
                bills.extend(await self.repo.list_for_property(prop.id))
            return bills
        return await self.repo.list_for_renter(current_user.id)

    async def create_bill(self, current_user, data: dict) -> Bill:
        prop = await self.property_repo.get_by_id(data["property_id"])
        if not prop:
            raise ValidationError(
                "Property not found.", details={"property_id": str(data["property_id"])}
            )
        await self.permission.check_property_owner(current_user, prop)

        data["type"] = normalize_bill_type(data.get("type"))
        data.setdefault("status", BillStatus.PENDING)

        async with transition(self.db, "create bill"):
            bill = await self.repo.create(**data)

        await self.notifier.send(
            bill.renter_id,
            "New Bill",
            f"A new {bill.type.value} bill of {bill.amount} for {prop.title} is due on {bill.due_date.isoformat()}.",
            NotificationType.INFO,
            "/?section=bills",
        )
        await self.publisher.publish(
            "bill.created",
            {"bill_id": str(bill.id), "property_id": str(prop.id)},
        )
        return bill

    async def pay_bill(self, current_user, bill_id: uuid.UUID) -> Optional[Bill]:
        bill = await self.repo.get_by_id(bill_id)
        if not bill:
            return None
        if current_user.role != UserRole.ADMIN and bill.renter_id != current_user.id:
            raise PermissionDeniedError("You can only pay your own bills.")
        if bill.status == BillStatus.PAID:
            return bill

        async with transition(self.db, "pay bill"):
            await self.repo.stage(
                bill, status=BillStatus.PAID, paid_date=datetime.now(timezone.utc)
            )
        return bill

    async def mark_overdue_bills(self, current_user) -> int:
        await self.permission.check_admin(current_user)
        cutoff = today()
        overdue = [
            bill
            for bill in await self.repo.list_all()
            if bill.status == BillStatus.PENDING and bill.due_date < cutoff
        ]
        if not overdue:
            return 0

        async with transition(self.db, "mark overdue bills"):
            for bill in overdue:
                await self.repo.stage(bill, status=BillStatus.OVERDUE)

        logger.info("Marked %s bill(s) overdue", len(overdue))
        return len(overdue)
