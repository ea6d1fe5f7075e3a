"""Cart item management: commands and handler."""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.domain import storefront
from storefront.errors import CartNotFound
from storefront.product.product import Product


@storefront.command(part_of="Cart")
class AddToCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant = String(max_length=100, default="")
    quantity = Integer(default=1)


@storefront.command(part_of="Cart")
class UpdateCartItem:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant = String(max_length=100, default="")
    quantity = Integer(required=True)


@storefront.command(part_of="Cart")
class RemoveFromCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant = String(max_length=100)  # None removes every line of the product


@storefront.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    def _existing(self, user_id):
        cart = current_domain.repository_for(Cart).find_for_user(user_id)
        if cart is None:
            raise CartNotFound(user_id)
        return cart

    @handle(AddToCart)
    def add_to_cart(self, command):
        current_domain.repository_for(Product).get_or_raise(command.product_id)

        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_create(command.user_id)
        cart.add_item(
            product_id=command.product_id,
            quantity=command.quantity,
            variant=command.variant,
        )
        repo.add(cart)

    @handle(UpdateCartItem)
    def update_cart_item(self, command):
        cart = self._existing(command.user_id)
        cart.update_item_quantity(command.product_id, command.variant, command.quantity)
        current_domain.repository_for(Cart).add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        cart = self._existing(command.user_id)
        cart.remove_item(command.product_id, command.variant)
        current_domain.repository_for(Cart).add(cart)
