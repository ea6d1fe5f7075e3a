import json

import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


def _reset_singletons():
    from storefront.identity import reset_identity_provider
    from storefront.inventory.ledger import reset_ledger
    from storefront.notifications.channel import reset_email_channel
    from storefront.order.numbering import reset_allocator

    reset_email_channel()
    reset_identity_provider()
    reset_ledger()
    reset_allocator()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    """Run every test inside the storefront domain and leave no data behind."""
    _reset_singletons()
    with storefront_bed.domain_context():
        yield

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()
    _reset_singletons()


@pytest.fixture()
def outbox():
    """The in-memory e-mail adapter used by the notification dispatcher."""
    from storefront.notifications.channel import get_email_channel

    return get_email_channel()


# ---------------------------------------------------------------------------
# Catalog helpers
# ---------------------------------------------------------------------------
@pytest.fixture()
def make_product():
    """Create (and by default publish) a product, returning its id."""
    from storefront.product.management import CreateProduct, PublishProduct

    def _make(
        name="Linen Shirt",
        price="AED 100.00",
        variants=None,
        stock_model="per_variant",
        in_stock=False,
        publish=True,
    ):
        if variants is None and stock_model == "per_variant":
            variants = [{"name": "White", "stock": 10}]
        product_id = current_domain.process(
            CreateProduct(
                name=name,
                price=price,
                stock_model=stock_model,
                variants=json.dumps(variants or []),
                in_stock=in_stock,
            ),
            asynchronous=False,
        )
        if publish:
            current_domain.process(PublishProduct(product_id=product_id), asynchronous=False)
        return product_id

    return _make


@pytest.fixture()
def load_product():
    from storefront.product.product import Product

    def _load(product_id):
        return current_domain.repository_for(Product)._dao.get(product_id)

    return _load


# ---------------------------------------------------------------------------
# Order helpers
# ---------------------------------------------------------------------------
@pytest.fixture()
def order_payload():
    """Build a valid raw order request for the given product lines."""

    def _payload(lines, customer_id="cust-001", tax=5.0, **overrides):
        items = [
            {
                "product_id": line["product_id"],
                "product_name": line.get("product_name", "Linen Shirt"),
                "variant": line.get("variant", "White"),
                "quantity": line.get("quantity", 1),
                "unit_price": line.get("unit_price", 100.0),
                "line_total": line.get("unit_price", 100.0) * line.get("quantity", 1),
            }
            for line in lines
        ]
        subtotal = sum(item["line_total"] for item in items)
        payload = {
            "customer_id": customer_id,
            "customer_name": "Amira Haddad",
            "customer_email": "amira@example.com",
            "shipping_address": "12 Palm Street, Dubai",
            "items": items,
            "subtotal": subtotal,
            "tax": tax,
            "total_amount": subtotal + tax,
        }
        payload.update(overrides)
        return payload

    return _payload


@pytest.fixture()
def place():
    """Run CreateOrder for a raw payload and return the new order id."""
    from storefront.order.creation import CreateOrder

    def _place(payload):
        data = dict(payload)
        items = data.pop("items", None)
        command = CreateOrder(items=json.dumps(items) if items is not None else None, **data)
        return current_domain.process(command, asynchronous=False)

    return _place


@pytest.fixture()
def load_order():
    from storefront.order.order import Order

    def _load(order_id):
        return current_domain.repository_for(Order).reload(order_id)

    return _load
