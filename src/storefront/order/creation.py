"""Order creation: explicit validation, number allocation and stock decrement.

Input is validated up front and rejected as a whole with a field -> messages
``ValidationError``. Only then is an order number allocated and stock taken.
If a later line cannot be decremented, the lines already taken in this
request are put back before the error propagates.
"""

import json
from collections import defaultdict
from datetime import UTC, datetime

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.errors import ConflictError, ProductNotFound
from storefront.inventory.ledger import get_ledger
from storefront.notifications.dispatch import send_order_confirmation
from storefront.order.numbering import get_allocator
from storefront.order.order import Order, order_view
from storefront.product.product import Product
from storefront.shared.money import round_money

logger = structlog.get_logger(__name__)

TOTAL_TOLERANCE = 0.01
REQUIRED_FIELDS = ("customer_id", "customer_name", "customer_email", "shipping_address", "subtotal", "tax")


def _number(value):
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _validate_item(index, item, errors):
    prefix = f"items[{index}]"
    if not isinstance(item, dict):
        errors["items"].append(f"{prefix} must be an object")
        return None

    for key in ("product_id", "product_name"):
        if not item.get(key):
            errors["items"].append(f"{prefix}.{key} is required")

    quantity = item.get("quantity")
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        errors["items"].append(f"{prefix}.quantity must be a positive integer")

    unit_price = _number(item.get("unit_price"))
    line_total = _number(item.get("line_total"))
    if unit_price is None or unit_price < 0:
        errors["items"].append(f"{prefix}.unit_price must be a non-negative number")
    if line_total is None or line_total < 0:
        errors["items"].append(f"{prefix}.line_total must be a non-negative number")

    return {
        "product_id": str(item.get("product_id") or ""),
        "product_name": item.get("product_name"),
        "variant": item.get("variant") or "",
        "quantity": quantity,
        "unit_price": unit_price,
        "line_total": line_total,
    }


def validate_order_request(data: dict) -> dict:
    """Check a raw order request and return its normalized form.

    Raises ``ValidationError`` listing every problem found.
    """
    errors = defaultdict(list)

    for field in REQUIRED_FIELDS:
        if data.get(field) in (None, ""):
            errors[field].append("is required")

    email = data.get("customer_email")
    if email and "@" not in str(email):
        errors["customer_email"].append("is not a valid e-mail address")

    items = data.get("items")
    normalized_items = []
    if not isinstance(items, list) or not items:
        errors["items"].append("Order must contain at least one item")
    else:
        normalized_items = [_validate_item(i, item, errors) for i, item in enumerate(items)]

    subtotal = _number(data.get("subtotal"))
    tax = _number(data.get("tax"))
    if data.get("subtotal") is not None and (subtotal is None or subtotal < 0):
        errors["subtotal"].append("must be a non-negative number")
    if data.get("tax") is not None and (tax is None or tax < 0):
        errors["tax"].append("must be a non-negative number")

    total_amount = data.get("total_amount")
    if subtotal is not None and tax is not None:
        total = _number(total_amount) if total_amount is not None else round_money(subtotal + tax)
        if total is None:
            errors["total_amount"].append("must be a number")
        elif round(abs(subtotal + tax - total), 2) > TOTAL_TOLERANCE:
            errors["total_amount"].append("Total amount must equal subtotal plus tax")
        total_amount = total

    if errors:
        raise ValidationError(dict(errors))

    return {
        "customer_id": str(data["customer_id"]),
        "customer_name": data["customer_name"],
        "customer_email": data["customer_email"],
        "shipping_address": data["shipping_address"],
        "items": normalized_items,
        "subtotal": subtotal,
        "tax": tax,
        "total_amount": total_amount,
        "notes": data.get("notes"),
    }


def _take_stock(items: list[dict]) -> list[dict]:
    """Decrement stock line by line. Returns the lines that were taken."""
    ledger = get_ledger()
    products = current_domain.repository_for(Product)
    taken = []

    try:
        for item in items:
            product = products.find(item["product_id"])
            if product is None:
                raise ProductNotFound(item["product_id"])

            if product.tracks_variants:
                ledger.decrement(item["product_id"], item["variant"], item["quantity"])
                taken.append(item)
            elif not product.in_stock:
                raise ConflictError(
                    f"{product.name} is out of stock",
                    product_id=item["product_id"],
                )
    except Exception:
        _put_back(taken)
        raise

    return taken


def _put_back(taken: list[dict]) -> None:
    ledger = get_ledger()
    for item in reversed(taken):
        try:
            ledger.restock(item["product_id"], item["variant"], item["quantity"])
        except Exception as e:
            logger.error(
                "Failed to return stock after aborted order",
                product_id=item["product_id"],
                variant=item["variant"],
                quantity=item["quantity"],
                error=str(e),
            )


def place_order(data: dict, now: datetime | None = None) -> Order:
    """Validate, number, decrement and persist an order. Returns the stored order."""
    request = validate_order_request(data)
    now = now or datetime.now(UTC)

    order_number = get_allocator().next_order_number(now)
    taken = _take_stock(request["items"])

    try:
        order = Order.create(order_number=order_number, placed_at=now, **request)
        current_domain.repository_for(Order).add(order)
    except Exception:
        _put_back(taken)
        raise

    logger.info(
        "Order placed",
        order_id=str(order.id),
        order_number=order_number,
        customer_id=request["customer_id"],
        total_amount=request["total_amount"],
    )
    send_order_confirmation(order_view(order))
    return order


@storefront.command(part_of="Order")
class CreateOrder:
    customer_id = Identifier()
    customer_name = String(max_length=255)
    customer_email = String(max_length=255)
    shipping_address = Text()
    items = Text()  # JSON array of line items
    subtotal = Float()
    tax = Float()
    total_amount = Float()
    notes = Text()


@storefront.command_handler(part_of=Order)
class CreateOrderHandler:
    @handle(CreateOrder)
    def create_order(self, command):
        data = command.to_dict()
        try:
            data["items"] = json.loads(command.items) if command.items else None
        except (json.JSONDecodeError, TypeError):
            raise ValidationError({"items": ["Items must be a JSON array"]})

        order = place_order(data)
        return str(order.id)
