import pytest
from protean.exceptions import ValidationError

from storefront.cart.cart import Cart
from storefront.cart.events import CartCleared, CartItemAdded, CartItemRemoved, CartQuantityUpdated
from storefront.errors import NotFoundError


@pytest.fixture()
def cart():
    return Cart.create(user_id="user-001")


class TestAddItem:
    def test_adds_a_line(self, cart):
        cart.add_item("prod-1", quantity=2, variant="White")
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 2
        assert cart.items[0].variant == "White"

    def test_same_product_and_variant_grows_the_line(self, cart):
        cart.add_item("prod-1", quantity=2, variant="White")
        cart.add_item("prod-1", quantity=3, variant="White")
        assert len(cart.items) == 1
        assert cart.items[0].quantity == 5

    def test_other_variant_is_a_separate_line(self, cart):
        cart.add_item("prod-1", quantity=1, variant="White")
        cart.add_item("prod-1", quantity=1, variant="Navy")
        assert len(cart.items) == 2

    def test_missing_variant_defaults_to_empty(self, cart):
        cart.add_item("prod-1")
        assert cart.items[0].variant == ""
        assert cart.items[0].quantity == 1

    def test_zero_quantity_rejected(self, cart):
        with pytest.raises(ValidationError):
            cart.add_item("prod-1", quantity=0)

    def test_raises_event(self, cart):
        cart.add_item("prod-1", quantity=1)
        assert isinstance(cart._events[-1], CartItemAdded)


class TestUpdateAndRemove:
    def test_update_quantity(self, cart):
        cart.add_item("prod-1", quantity=1, variant="White")
        cart.update_item_quantity("prod-1", "White", 4)
        assert cart.items[0].quantity == 4
        event = cart._events[-1]
        assert isinstance(event, CartQuantityUpdated)
        assert event.previous_quantity == 1

    def test_update_unknown_line(self, cart):
        with pytest.raises(NotFoundError):
            cart.update_item_quantity("prod-1", "White", 2)

    def test_update_to_zero_rejected(self, cart):
        cart.add_item("prod-1", quantity=1, variant="White")
        with pytest.raises(ValidationError):
            cart.update_item_quantity("prod-1", "White", 0)

    def test_remove_specific_variant(self, cart):
        cart.add_item("prod-1", quantity=1, variant="White")
        cart.add_item("prod-1", quantity=1, variant="Navy")
        cart.remove_item("prod-1", "Navy")
        assert [i.variant for i in cart.items] == ["White"]
        assert isinstance(cart._events[-1], CartItemRemoved)

    def test_remove_without_variant_drops_every_line_of_the_product(self, cart):
        cart.add_item("prod-1", quantity=1, variant="White")
        cart.add_item("prod-1", quantity=1, variant="Navy")
        cart.add_item("prod-2", quantity=1)
        cart.remove_item("prod-1")
        assert [str(i.product_id) for i in cart.items] == ["prod-2"]

    def test_remove_unknown_product(self, cart):
        with pytest.raises(NotFoundError):
            cart.remove_item("prod-9")

    def test_clear(self, cart):
        cart.add_item("prod-1", quantity=1)
        cart.add_item("prod-2", quantity=1)
        cart.clear()
        assert cart.items == []
        assert isinstance(cart._events[-1], CartCleared)
