"""Domain events for the Cart aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Cart")
class CartItemAdded:
    user_id: Identifier(required=True)
    product_id: Identifier(required=True)
    variant: String()
    quantity: Integer(required=True)


@storefront.event(part_of="Cart")
class CartQuantityUpdated:
    user_id: Identifier(required=True)
    product_id: Identifier(required=True)
    variant: String()
    previous_quantity: Integer(required=True)
    new_quantity: Integer(required=True)


@storefront.event(part_of="Cart")
class CartItemRemoved:
    user_id: Identifier(required=True)
    product_id: Identifier(required=True)
    variant: String()


@storefront.event(part_of="Cart")
class CartCleared:
    """All lines were removed, typically after checkout."""

    user_id: Identifier(required=True)
    cleared_at: DateTime(required=True)
