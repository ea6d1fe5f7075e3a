"""Cart aggregate: one per user, created lazily on the first add."""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String

from storefront.cart.events import CartCleared, CartItemAdded, CartItemRemoved, CartQuantityUpdated
from storefront.domain import storefront
from storefront.errors import NotFoundError


@storefront.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    variant = String(max_length=100, default="")
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()

    def matches(self, product_id, variant=None) -> bool:
        if str(self.product_id) != str(product_id):
            return False
        return variant is None or (self.variant or "") == (variant or "")


@storefront.aggregate
class Cart:
    user_id = Identifier(identifier=True, required=True)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, user_id):
        now = datetime.now(UTC)
        return cls(user_id=user_id, created_at=now, updated_at=now)

    def _find(self, product_id, variant):
        return next((i for i in self.items if i.matches(product_id, variant)), None)

    def add_item(self, product_id, quantity=1, variant=""):
        """Add a line, or grow the existing line for the same product and variant."""
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        variant = variant or ""
        now = datetime.now(UTC)
        existing = self._find(product_id, variant)
        if existing:
            existing.quantity += quantity
        else:
            self.add_items(CartItem(product_id=product_id, variant=variant, quantity=quantity, added_at=now))
        self.updated_at = now

        self.raise_(
            CartItemAdded(
                user_id=self.user_id,
                product_id=str(product_id),
                variant=variant,
                quantity=quantity,
            )
        )

    def update_item_quantity(self, product_id, variant, quantity):
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        item = self._find(product_id, variant or "")
        if item is None:
            raise NotFoundError("Item not found in cart", product_id=str(product_id), variant=variant or "")

        previous = item.quantity
        item.quantity = quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                user_id=self.user_id,
                product_id=str(product_id),
                variant=variant or "",
                previous_quantity=previous,
                new_quantity=quantity,
            )
        )

    def remove_item(self, product_id, variant=None):
        """Remove matching lines. With no variant, every line of the product goes."""
        matching = [i for i in self.items if i.matches(product_id, variant)]
        if not matching:
            raise NotFoundError("Item not found in cart", product_id=str(product_id), variant=variant or "")

        for item in matching:
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(CartItemRemoved(user_id=self.user_id, product_id=str(product_id), variant=variant or ""))

    def drop(self, item):
        """Drop a line during reconciliation."""
        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

    def limit(self, item, quantity: int):
        """Lower a line to what is actually available during reconciliation."""
        item.quantity = quantity
        self.updated_at = datetime.now(UTC)

    def clear(self):
        for item in list(self.items):
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)
        self.raise_(CartCleared(user_id=self.user_id, cleared_at=self.updated_at))
