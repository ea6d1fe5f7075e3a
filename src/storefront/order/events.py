"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """An order was created, stock was taken and an order number assigned."""

    order_id: Identifier(required=True)
    order_number: String(required=True)
    customer_id: Identifier(required=True)
    item_count: Integer(required=True)
    total_amount: Float(required=True)
    placed_at: DateTime(required=True)
