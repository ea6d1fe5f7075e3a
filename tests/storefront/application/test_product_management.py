"""Catalog administration: publication and availability writes."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError

from storefront.inventory.ledger import InventoryLedger
from storefront.product.management import PublishProduct, SetProductAvailability, UnpublishProduct
from storefront.product.product import Product
from storefront.product.repository import ProductRepository
from storefront.shared.guarded import update_where


def _process(command):
    return current_domain.process(command, asynchronous=False)


@pytest.fixture()
def after_load(monkeypatch):
    """Run ``write`` once, right after the handler has loaded its product copy."""

    def _install(write):
        original = ProductRepository.get_or_raise
        pending = [write]

        def get_or_raise(self, product_id):
            product = original(self, product_id)
            if pending:
                pending.pop()()
            return product

        monkeypatch.setattr(ProductRepository, "get_or_raise", get_or_raise)

    return _install


class TestPublication:
    def test_publish_and_unpublish(self, make_product, load_product):
        product_id = make_product(publish=False)

        _process(PublishProduct(product_id=product_id))
        assert load_product(product_id).status == "published"

        _process(UnpublishProduct(product_id=product_id))
        assert load_product(product_id).status == "draft"

    def test_publishing_twice_is_rejected(self, make_product):
        product_id = make_product()

        with pytest.raises(ValidationError) as exc:
            _process(PublishProduct(product_id=product_id))

        assert exc.value.messages == {"status": ["Product is already published"]}

    def test_unpublish_keeps_stock_drained_after_load(self, make_product, load_product, after_load):
        product_id = make_product(variants=[{"name": "White", "stock": 2}])
        after_load(lambda: InventoryLedger().decrement(product_id, "White", 2))

        _process(UnpublishProduct(product_id=product_id))

        product = load_product(product_id)
        assert product.status == "draft"
        assert product.variant_named("White").stock == 0
        assert product.in_stock is False

    def test_unpublish_keeps_rating_written_after_load(self, make_product, load_product, after_load):
        product_id = make_product()
        dao = current_domain.repository_for(Product)._dao
        after_load(lambda: update_where(dao, {"id": product_id}, rating=4.5, review_count=2))

        _process(UnpublishProduct(product_id=product_id))

        product = load_product(product_id)
        assert (product.rating, product.review_count) == (4.5, 2)

    def test_status_moved_by_another_admin(self, make_product, after_load):
        product_id = make_product(publish=False)
        dao = current_domain.repository_for(Product)._dao
        after_load(lambda: update_where(dao, {"id": product_id}, status="published"))

        with pytest.raises(ValidationError) as exc:
            _process(PublishProduct(product_id=product_id))

        assert exc.value.messages == {"status": ["Product is already published"]}


class TestAvailability:
    def test_boolean_product_toggles(self, make_product, load_product):
        product_id = make_product(stock_model="boolean", in_stock=True)

        _process(SetProductAvailability(product_id=product_id, in_stock=False))

        assert load_product(product_id).in_stock is False

    def test_per_variant_product_is_rejected(self, make_product, load_product):
        product_id = make_product(variants=[{"name": "White", "stock": 3}])

        with pytest.raises(ValidationError) as exc:
            _process(SetProductAvailability(product_id=product_id, in_stock=False))

        assert "in_stock" in exc.value.messages
        product = load_product(product_id)
        assert product.in_stock is True
        assert product.variant_named("White").stock == 3
