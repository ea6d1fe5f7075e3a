"""Repository for the Cart aggregate."""

from protean.exceptions import ObjectNotFoundError

from storefront.cart.cart import Cart
from storefront.domain import storefront


@storefront.repository(part_of=Cart)
class CartRepository:
    def find_for_user(self, user_id) -> Cart | None:
        try:
            return self.get(str(user_id))
        except ObjectNotFoundError:
            return None

    def get_or_create(self, user_id) -> Cart:
        return self.find_for_user(user_id) or Cart.create(user_id=str(user_id))
