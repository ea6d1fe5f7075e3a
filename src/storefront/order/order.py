"""Order aggregate: an immutable purchase snapshot with a small mutable lifecycle.

Prices, product names, the customer and the shipping address are copied at
creation time. After that only ``status``, ``payment_status``,
``tracking_number`` and ``notes`` change, through
``storefront.order.lifecycle``. ``delivered_at`` is stamped the first time the
order enters ``delivered`` and never moves afterwards.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text

from storefront.domain import storefront

CANCELLATION_NOTE = "Order cancellation is not allowed. Please contact admin for assistance."


class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


@storefront.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    variant = String(max_length=100, default="")
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    line_total = Float(required=True, min_value=0.0)


@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=32, unique=True)
    customer_id = Identifier(required=True)
    customer_name = String(required=True, max_length=255)
    customer_email = String(required=True, max_length=255)
    shipping_address = Text(required=True)
    items = HasMany(OrderItem)
    subtotal = Float(required=True, min_value=0.0)
    tax = Float(default=0.0, min_value=0.0)
    total_amount = Float(required=True, min_value=0.0)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    tracking_number = String(max_length=100)
    notes = Text()
    cancellation_note = String(max_length=255, default=CANCELLATION_NOTE)
    delivered_at = DateTime()
    order_date = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(
        cls,
        order_number,
        customer_id,
        customer_name,
        customer_email,
        shipping_address,
        items,
        subtotal,
        tax,
        total_amount,
        notes=None,
        placed_at=None,
    ):
        """Build a pending order from already validated input."""
        from storefront.order.events import OrderPlaced

        now = placed_at or datetime.now(UTC)
        order = cls(
            order_number=order_number,
            customer_id=customer_id,
            customer_name=customer_name,
            customer_email=customer_email,
            shipping_address=shipping_address,
            items=[OrderItem(**item) for item in items],
            subtotal=subtotal,
            tax=tax,
            total_amount=total_amount,
            notes=notes,
            order_date=now,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=order.id,
                order_number=order_number,
                customer_id=customer_id,
                item_count=len(items),
                total_amount=total_amount,
                placed_at=now,
            )
        )
        return order

    @property
    def is_delivered(self) -> bool:
        return self.status == OrderStatus.DELIVERED.value

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.PAID.value


def _iso(value):
    return value.isoformat() if value else None


def order_view(order: Order) -> dict:
    """Plain-dict rendering of an order for API responses and notifications."""
    return {
        "id": str(order.id),
        "order_number": order.order_number,
        "customer_id": str(order.customer_id),
        "customer_name": order.customer_name,
        "customer_email": order.customer_email,
        "shipping_address": order.shipping_address,
        "items": [
            {
                "product_id": str(item.product_id),
                "product_name": item.product_name,
                "variant": item.variant or "",
                "unit_price": item.unit_price,
                "quantity": item.quantity,
                "line_total": item.line_total,
            }
            for item in order.items
        ],
        "subtotal": order.subtotal,
        "tax": order.tax,
        "total_amount": order.total_amount,
        "status": order.status,
        "payment_status": order.payment_status,
        "tracking_number": order.tracking_number,
        "notes": order.notes,
        "cancellation_note": order.cancellation_note,
        "delivered_at": _iso(order.delivered_at),
        "order_date": _iso(order.order_date),
        "created_at": _iso(order.created_at),
        "updated_at": _iso(order.updated_at),
    }
