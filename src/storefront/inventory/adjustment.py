"""Inventory adjustment: commands and handler routed through the ledger."""

from protean import handle
from protean.fields import Identifier, Integer, String

from storefront.domain import storefront
from storefront.inventory.ledger import get_ledger
from storefront.product.product import Product


@storefront.command(part_of="Product")
class DecrementInventory:
    """Take units of one variant out of stock. Rejected outright if stock is short."""

    product_id: Identifier(required=True)
    variant: String(required=True, max_length=100)
    quantity: Integer(required=True)


@storefront.command(part_of="Product")
class RestockInventory:
    """Put units of one variant back into stock."""

    product_id: Identifier(required=True)
    variant: String(required=True, max_length=100)
    quantity: Integer(required=True)


@storefront.command_handler(part_of=Product)
class InventoryAdjustmentHandler:
    @handle(DecrementInventory)
    def decrement(self, command):
        return get_ledger().decrement(command.product_id, command.variant, command.quantity)

    @handle(RestockInventory)
    def restock(self, command):
        return get_ledger().restock(command.product_id, command.variant, command.quantity)
