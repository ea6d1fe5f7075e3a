"""Checkout: turn a reconciled cart into an order."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.cart.reconciliation import CartReconciler
from storefront.domain import storefront
from storefront.errors import CartChanged
from storefront.order.creation import place_order
from storefront.order.order import Order
from storefront.shared.money import round_money


@storefront.command(part_of="Order")
class CheckoutCart:
    user_id = Identifier(required=True)
    customer_name = String(required=True, max_length=255)
    customer_email = String(required=True, max_length=255)
    shipping_address = Text(required=True)
    tax = Float(default=0.0, min_value=0.0)
    notes = Text()


def order_lines_from(snapshot: dict) -> list[dict]:
    return [
        {
            "product_id": line["product_id"],
            "product_name": line["product_name"],
            "variant": line["variant"],
            "quantity": line["quantity"],
            "unit_price": line["unit_price"],
            "line_total": round_money(line["unit_price"] * line["quantity"]),
        }
        for line in snapshot["items"]
    ]


@storefront.command_handler(part_of=Order)
class CheckoutCartHandler:
    @handle(CheckoutCart)
    def checkout(self, command):
        result = CartReconciler().reconcile_for_user(command.user_id)
        if result["changes"]:
            raise CartChanged(result["changes"])
        if not result["cart"] or not result["cart"]["items"]:
            raise ValidationError({"cart": ["Cart is empty"]})

        subtotal = result["total"]
        tax = command.tax or 0.0
        order = place_order(
            {
                "customer_id": command.user_id,
                "customer_name": command.customer_name,
                "customer_email": command.customer_email,
                "shipping_address": command.shipping_address,
                "items": order_lines_from(result["cart"]),
                "subtotal": subtotal,
                "tax": tax,
                "total_amount": round_money(subtotal + tax),
                "notes": command.notes,
            }
        )

        carts = current_domain.repository_for(Cart)
        cart = carts.find_for_user(command.user_id)
        cart.clear()
        carts.add(cart)

        return str(order.id)
