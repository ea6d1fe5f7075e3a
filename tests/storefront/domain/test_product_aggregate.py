import pytest
from protean.exceptions import ValidationError

from storefront.product.events import ProductCreated, ProductPublished, ProductUnpublished
from storefront.product.product import Product, ProductStatus, StockModel


def _shirt(**overrides):
    kwargs = {
        "name": "Linen Shirt",
        "price": "AED 149.00",
        "variants": [{"name": "White", "stock": 3}, {"name": "Navy", "stock": 0}],
    }
    kwargs.update(overrides)
    return Product.create(**kwargs)


class TestProductCreation:
    def test_new_product_starts_as_draft(self):
        product = _shirt()
        assert product.status == ProductStatus.DRAFT.value
        assert product.stock_model == StockModel.PER_VARIANT.value

    def test_variant_flags_follow_their_stock(self):
        product = _shirt()
        assert product.variant_named("White").in_stock is True
        assert product.variant_named("Navy").in_stock is False

    def test_aggregate_in_stock_derived_from_variants(self):
        assert _shirt().in_stock is True
        assert _shirt(variants=[{"name": "White", "stock": 0}]).in_stock is False

    def test_in_stock_argument_ignored_for_per_variant_products(self):
        product = _shirt(variants=[{"name": "White", "stock": 0}], in_stock=True)
        assert product.in_stock is False

    def test_total_stock(self):
        assert _shirt().total_stock == 3

    def test_raises_created_event(self):
        product = _shirt()
        assert len(product._events) == 1
        event = product._events[0]
        assert isinstance(event, ProductCreated)
        assert event.variant_count == 2

    def test_per_variant_product_requires_a_variant(self):
        with pytest.raises(ValidationError) as exc:
            _shirt(variants=[])
        assert "variants" in exc.value.messages

    def test_variant_names_must_be_unique(self):
        with pytest.raises(ValidationError) as exc:
            _shirt(variants=[{"name": "White", "stock": 1}, {"name": "White", "stock": 2}])
        assert exc.value.messages["variants"] == ["Variant names must be unique"]

    def test_negative_variant_stock_rejected(self):
        with pytest.raises(ValidationError):
            _shirt(variants=[{"name": "White", "stock": -1}])

    def test_boolean_product_carries_no_variants(self):
        with pytest.raises(ValidationError):
            _shirt(stock_model="boolean")

    def test_boolean_product_takes_in_stock_directly(self):
        product = Product.create(name="Gift Card", price="AED 50", stock_model="boolean", in_stock=True)
        assert product.in_stock is True
        assert product.variants == []
        assert product.tracks_variants is False

    def test_unknown_stock_model_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _shirt(stock_model="warehouse")
        assert "stock_model" in exc.value.messages


class TestPublication:
    def test_publish(self):
        product = _shirt()
        product.publish()
        assert product.is_published
        assert isinstance(product._events[-1], ProductPublished)

    def test_cannot_publish_twice(self):
        product = _shirt()
        product.publish()
        with pytest.raises(ValidationError):
            product.publish()

    def test_unpublish_returns_to_draft(self):
        product = _shirt()
        product.publish()
        product.unpublish()
        assert product.status == ProductStatus.DRAFT.value
        assert isinstance(product._events[-1], ProductUnpublished)

    def test_cannot_unpublish_a_draft(self):
        with pytest.raises(ValidationError):
            _shirt().unpublish()


class TestAvailabilityToggle:
    def test_boolean_product_toggle(self):
        product = Product.create(name="Gift Card", price="AED 50", stock_model="boolean", in_stock=True)
        product.set_availability(False)
        assert product.in_stock is False

    def test_per_variant_product_cannot_be_toggled(self):
        with pytest.raises(ValidationError):
            _shirt().set_availability(False)
