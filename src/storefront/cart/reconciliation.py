"""Cart Reconciler: brings a stored cart in line with current catalog truth.

Each line is checked against its product, in cart order:

1. the product must still exist and be published;
2. per-variant products need the selected variant, in stock, with enough
   units (otherwise the line is lowered to what is left);
3. products without variant counters must be flagged in stock.

Every correction is reported as a change so the client can tell the shopper
what happened. The cart is only written back when something changed, which
makes a second pass over an unchanged catalog a no-op.

Reconciliation is a best-effort snapshot. The decrement performed at order
creation is what actually guards against overselling.
"""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.domain import storefront
from storefront.product.product import Product
from storefront.shared.money import parse_price, round_money

logger = structlog.get_logger(__name__)

PRODUCT_MISSING = "Product no longer exists"
PRODUCT_UNPUBLISHED = "Product is unpublished"
VARIANT_MISSING = "Selected variant not available"
VARIANT_OUT_OF_STOCK = "Selected variant out of stock"
LIMITED_STOCK = "Limited stock for selected variant"
PRODUCT_OUT_OF_STOCK = "Product is out of stock"


def _removed(item, reason, product=None) -> dict:
    change = {"type": "removed", "product_id": str(item.product_id), "reason": reason}
    if product is not None:
        change["product_name"] = product.name
    if item.variant:
        change["variant"] = item.variant
    return change


def _adjusted(item, product, to_qty) -> dict:
    return {
        "type": "adjusted",
        "product_id": str(item.product_id),
        "product_name": product.name,
        "variant": item.variant,
        "from_qty": item.quantity,
        "to_qty": to_qty,
        "reason": LIMITED_STOCK,
    }


def cart_snapshot(cart: Cart | None, products: dict | None = None) -> dict:
    """Serialize a cart with its line items and the total at current prices."""
    if cart is None:
        return {"cart": None, "total": 0.0}

    products = products if products is not None else {}
    repo = current_domain.repository_for(Product)
    lines = []
    total = 0.0
    for item in cart.items:
        key = str(item.product_id)
        if key not in products:
            products[key] = repo.find(key)
        product = products[key]

        unit_price = parse_price(product.price) if product else 0.0
        total += unit_price * item.quantity
        lines.append(
            {
                "product_id": key,
                "product_name": product.name if product else None,
                "variant": item.variant or "",
                "quantity": item.quantity,
                "unit_price": unit_price,
            }
        )

    return {
        "cart": {
            "user_id": str(cart.user_id),
            "items": lines,
            "updated_at": cart.updated_at.isoformat() if cart.updated_at else None,
        },
        "total": round_money(total),
    }


class CartReconciler:
    def _check(self, item, product):
        """Return ``(change, new_quantity)`` for one line. A None quantity means drop it."""
        if product is None:
            return _removed(item, PRODUCT_MISSING), None
        if not product.is_published:
            return _removed(item, PRODUCT_UNPUBLISHED, product), None

        if product.tracks_variants:
            variant = product.variant_named(item.variant)
            if variant is None:
                return _removed(item, VARIANT_MISSING, product), None

            stock = variant.stock or 0
            if not variant.in_stock or stock <= 0:
                return _removed(item, VARIANT_OUT_OF_STOCK, product), None
            if item.quantity > stock:
                return _adjusted(item, product, stock), stock
            return None, item.quantity

        if not product.in_stock:
            return _removed(item, PRODUCT_OUT_OF_STOCK, product), None
        return None, item.quantity

    def reconcile(self, cart: Cart | None) -> dict:
        if cart is None or not cart.items:
            return {"ok": True, "changes": [], "cart": None, "total": 0.0}

        repo = current_domain.repository_for(Product)
        products = {}
        changes = []
        changed = False

        for item in list(cart.items):
            key = str(item.product_id)
            if key not in products:
                products[key] = repo.find(key)

            change, quantity = self._check(item, products[key])
            if change:
                changes.append(change)

            if quantity is None:
                cart.drop(item)
                changed = True
            elif quantity != item.quantity:
                cart.limit(item, quantity)
                changed = True

        if changed:
            current_domain.repository_for(Cart).add(cart)
            logger.info("Cart reconciled", user_id=str(cart.user_id), changes=len(changes))

        snapshot = cart_snapshot(cart, products)
        return {"ok": not changes, "changes": changes, **snapshot}

    def reconcile_for_user(self, user_id) -> dict:
        cart = current_domain.repository_for(Cart).find_for_user(user_id)
        return self.reconcile(cart)


@storefront.command(part_of="Cart")
class ValidateCart:
    user_id = Identifier(required=True)


@storefront.command_handler(part_of=Cart)
class ValidateCartHandler:
    @handle(ValidateCart)
    def validate_cart(self, command):
        return CartReconciler().reconcile_for_user(command.user_id)
