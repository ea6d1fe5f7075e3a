"""Order Lifecycle Manager: the restricted admin update surface.

Only ``status``, ``payment_status``, ``tracking_number`` and ``notes`` can
change after creation. Updates are written field by field, last writer wins,
so an update never rewrites the item snapshot or customer details.

Entering ``delivered`` stamps ``delivered_at`` with a compare-and-set on the
null value, so the first delivery time sticks even if the status later moves
away and back. When the status actually changes the customer is e-mailed.
"""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.notifications.dispatch import notify_status_change
from storefront.order.order import Order, OrderStatus, PaymentStatus, order_view
from storefront.shared.guarded import update_where

logger = structlog.get_logger(__name__)

MUTABLE_FIELDS = ("status", "payment_status", "tracking_number", "notes")


def _check_choices(updates: dict) -> None:
    errors = {}
    for field, enum in (("status", OrderStatus), ("payment_status", PaymentStatus)):
        value = updates.get(field)
        if value is not None and value not in {m.value for m in enum}:
            allowed = ", ".join(m.value for m in enum)
            errors[field] = [f"Value `{value}` is not a valid choice. Must be one of: {allowed}"]
    if errors:
        raise ValidationError(errors)


class OrderLifecycleManager:
    def update(self, order_id, changes: dict) -> Order:
        """Apply the mutable subset of ``changes`` and return the stored order.

        Keys outside the mutable surface are ignored. ``None`` values mean
        "leave unchanged".
        """
        updates = {k: v for k, v in changes.items() if k in MUTABLE_FIELDS and v is not None}
        _check_choices(updates)

        repo = current_domain.repository_for(Order)
        before = repo.reload(order_id)
        now = datetime.now(UTC)

        if updates:
            update_where(repo._dao, {"id": str(before.id)}, updated_at=now, **updates)

        if updates.get("status") == OrderStatus.DELIVERED.value:
            stamped = update_where(
                repo._dao,
                {"id": str(before.id), "delivered_at__isnull": True},
                delivered_at=now,
            )
            if stamped:
                logger.info("Order delivered", order_id=str(before.id), delivered_at=now.isoformat())

        order = repo.reload(order_id)
        logger.info("Order updated", order_id=str(order.id), fields=sorted(updates))

        new_status = updates.get("status")
        if new_status is not None and new_status != before.status:
            notify_status_change(order_view(order), before.status)

        return order


@storefront.command(part_of="Order")
class UpdateOrder:
    order_id = Identifier(required=True)
    status = String(max_length=20)
    payment_status = String(max_length=20)
    tracking_number = String(max_length=100)
    notes = Text()


@storefront.command_handler(part_of=Order)
class UpdateOrderHandler:
    @handle(UpdateOrder)
    def update_order(self, command):
        changes = {field: getattr(command, field) for field in MUTABLE_FIELDS}
        order = OrderLifecycleManager().update(command.order_id, changes)
        return str(order.id)
