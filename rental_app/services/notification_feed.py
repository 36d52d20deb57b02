"""Per-user notification feed.

The feed is rebuilt from scratch on every read: persisted notification
rows are merged with synthetic reminders derived from bills, applications
and bookings. Synthetic items carry stable string ids so read and dismiss
state survives the rebuild.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, List, Optional, Set

from core.date_helper import days_until
from core.settings import settings
from models.enums import (
    ApplicationStatus,
    BillStatus,
    FeedItemKind,
    NotificationType,
    UserRole,
)

OVERDUE_BILLS_ID = "overdue-bills"
EXPIRING_LEASE_ID = "expiring-lease"


@dataclass
class FeedItem:
    id: str
    kind: FeedItemKind
    title: str
    message: str
    type: NotificationType
    link: str
    is_read: bool = False
    created_at: Optional[datetime] = None
    source: dict = field(default_factory=dict)
    notification: Any = None

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "title": self.title,
            "message": self.message,
            "type": self.type.value,
            "link": self.link,
            "is_read": self.is_read,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "source": self.source,
        }


def _persisted_items(user, persisted) -> List[FeedItem]:
    items = []
    for row in persisted:
        if row.user_id != user.id:
            continue
        items.append(
            FeedItem(
                id=str(row.id),
                kind=FeedItemKind.PERSISTED,
                title=row.title,
                message=row.message,
                type=row.type or NotificationType.INFO,
                link=row.link or "/",
                is_read=bool(row.is_read),
                created_at=row.created_at,
                notification=row,
            )
        )
    return items


def _renter_items(user, bills, applications, properties_by_id) -> List[FeedItem]:
    items = []
    my_bills = [b for b in bills if b.renter_id == user.id]
    overdue = [b for b in my_bills if b.status == BillStatus.OVERDUE]
    pending = [b for b in my_bills if b.status == BillStatus.PENDING]

    if overdue:
        items.append(
            FeedItem(
                id=OVERDUE_BILLS_ID,
                kind=FeedItemKind.SYNTHETIC,
                title="Action Required",
                message=f"You have {len(overdue)} overdue bill(s).",
                type=NotificationType.ALERT,
                link="/?section=bills",
                source={"entity": "bill", "ids": [str(b.id) for b in overdue]},
            )
        )
    elif pending:
        earliest = min(pending, key=lambda b: b.due_date)
        items.append(
            FeedItem(
                id=f"pending-{earliest.id}",
                kind=FeedItemKind.SYNTHETIC,
                title="New Bills",
                message=f"You have {len(pending)} pending bill(s) due soon.",
                type=NotificationType.INFO,
                link="/?section=bills",
                created_at=earliest.created_at,
                source={"entity": "bill", "id": str(earliest.id)},
            )
        )

    for app in applications:
        if app.renter_id != user.id or app.status == ApplicationStatus.PENDING:
            continue
        prop = properties_by_id.get(app.property_id)
        title = prop.title if prop else "a property"
        items.append(
            FeedItem(
                id=f"app-{app.id}",
                kind=FeedItemKind.SYNTHETIC,
                title="Application Update",
                message=f"Your application for {title} was {app.status.value.replace('_', ' ')}.",
                type=(
                    NotificationType.SUCCESS
                    if app.status == ApplicationStatus.APPROVED
                    else NotificationType.ALERT
                ),
                link=f"/property/{app.property_id}",
                created_at=app.created_at,
                source={"entity": "application", "id": str(app.id)},
            )
        )
    return items


def _owner_items(
    user, applications, properties, bookings, users_by_id, now
) -> List[FeedItem]:
    items = []
    owned = {p.id: p for p in properties if p.owner_id == user.id}

    for app in applications:
        if app.property_id not in owned or app.status != ApplicationStatus.PENDING:
            continue
        renter = users_by_id.get(app.renter_id)
        renter_name = (renter.full_name if renter else None) or "A renter"
        items.append(
            FeedItem(
                id=f"new-app-{app.id}",
                kind=FeedItemKind.SYNTHETIC,
                title="New Application",
                message=f"{renter_name} applied for {owned[app.property_id].title}.",
                type=NotificationType.INFO,
                link=f"/applications?reviewId={app.id}",
                created_at=app.created_at,
                source={"entity": "application", "id": str(app.id)},
            )
        )

    window = settings.EXPIRING_LEASE_WINDOW_DAYS
    expiring = [
        b
        for b in bookings
        if b.property_id in owned
        and b.is_active
        and b.end_date is not None
        and 0 <= days_until(b.end_date, now) <= window
    ]
    if expiring:
        items.append(
            FeedItem(
                id=EXPIRING_LEASE_ID,
                kind=FeedItemKind.SYNTHETIC,
                title="Leases Expiring",
                message=f"{len(expiring)} lease(s) are expiring within {window} days.",
                type=NotificationType.ALERT,
                link="/",
                source={"entity": "booking", "ids": [str(b.id) for b in expiring]},
            )
        )
    return items


def build_feed(
    user,
    persisted: Iterable = (),
    bills: Iterable = (),
    applications: Iterable = (),
    properties: Iterable = (),
    bookings: Iterable = (),
    users: Iterable = (),
    read_ids: Optional[Set[str]] = None,
    dismissed_ids: Optional[Set[str]] = None,
    now: Optional[datetime] = None,
) -> List[FeedItem]:
    if user is None:
        return []

    read_ids = read_ids or set()
    dismissed_ids = dismissed_ids or set()
    properties = list(properties)
    applications = list(applications)

    items = _persisted_items(user, persisted)

    if user.role == UserRole.RENTER:
        items.extend(
            _renter_items(
                user, list(bills), applications, {p.id: p for p in properties}
            )
        )
    elif user.role == UserRole.OWNER:
        items.extend(
            _owner_items(
                user,
                applications,
                properties,
                list(bookings),
                {u.id: u for u in users},
                now,
            )
        )

    visible = []
    for item in items:
        if item.id in dismissed_ids:
            continue
        item.is_read = item.is_read or item.id in read_ids
        visible.append(item)

    # unread first, source order otherwise
    return sorted(visible, key=lambda item: item.is_read)


def unread_count(feed: Iterable[FeedItem]) -> int:
    return sum(1 for item in feed if not item.is_read)
