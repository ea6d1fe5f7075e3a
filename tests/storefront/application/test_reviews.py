import pytest
from protean import current_domain
from protean.exceptions import ValidationError

from storefront.errors import DuplicateReview, OrderNotFound, ReviewNotFound
from storefront.order.lifecycle import UpdateOrder
from storefront.product.product import Product
from storefront.review.rating import RatingAggregator
from storefront.review.review import Review
from storefront.review.submission import DeleteReview, EditReview, SubmitReview
from storefront.shared.guarded import update_where


def _process(command):
    return current_domain.process(command, asynchronous=False)


@pytest.fixture()
def product_id(make_product):
    return make_product(variants=[{"name": "White", "stock": 50}])


@pytest.fixture()
def delivered_order(product_id, order_payload, place):
    """Place a paid, delivered order for ``customer_id`` and return its id."""

    def _order(customer_id="cust-001", status="delivered", payment_status="paid"):
        order_id = place(order_payload([{"product_id": product_id}], customer_id=customer_id))
        _process(UpdateOrder(order_id=order_id, status=status, payment_status=payment_status))
        return order_id

    return _order


def _review(product_id, order_id, customer_id="cust-001", rating=5, **overrides):
    fields = {
        "product_id": product_id,
        "order_id": order_id,
        "customer_id": customer_id,
        "customer_name": "Amira Haddad",
        "rating": rating,
        "title": "Lovely fabric",
        "comment": "Soft and breathable.",
    }
    fields.update(overrides)
    return _process(SubmitReview(**fields))


class TestEligibility:
    def test_delivered_and_paid_order_can_be_reviewed(self, product_id, delivered_order):
        review_id = _review(product_id, delivered_order())

        review = current_domain.repository_for(Review).get(review_id)
        assert review.rating == 5

    def test_undelivered_order(self, product_id, delivered_order):
        order_id = delivered_order(status="shipped")

        with pytest.raises(ValidationError) as exc:
            _review(product_id, order_id)
        assert exc.value.messages == {"order_id": ["Can only review delivered orders"]}

    def test_unpaid_order(self, product_id, delivered_order):
        order_id = delivered_order(payment_status="pending")

        with pytest.raises(ValidationError) as exc:
            _review(product_id, order_id)
        assert exc.value.messages == {"order_id": ["Can only review paid orders"]}

    def test_unknown_order(self, product_id):
        with pytest.raises(OrderNotFound):
            _review(product_id, "no-such-order")

    def test_missing_fields(self, product_id, delivered_order):
        with pytest.raises(ValidationError) as exc:
            _review(product_id, delivered_order(), title="", comment=None)
        assert set(exc.value.messages) == {"title", "comment"}

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_out_of_range(self, product_id, delivered_order, rating):
        with pytest.raises(ValidationError) as exc:
            _review(product_id, delivered_order(), rating=rating)
        assert "rating" in exc.value.messages

    def test_one_review_per_product_and_order(self, product_id, delivered_order):
        order_id = delivered_order()
        _review(product_id, order_id)

        with pytest.raises(DuplicateReview):
            _review(product_id, order_id, rating=1)


class TestRatingAggregate:
    def test_average_and_count_follow_submissions(self, product_id, delivered_order, load_product):
        for n, rating in enumerate([4, 5, 3]):
            customer = f"cust-{n}"
            _review(product_id, delivered_order(customer), customer_id=customer, rating=rating)

        product = load_product(product_id)
        assert product.rating == 4.0
        assert product.review_count == 3

    def test_edit_updates_the_average(self, product_id, delivered_order, load_product):
        review_id = _review(product_id, delivered_order(), rating=2)

        _process(EditReview(review_id=review_id, rating=5, title="Changed my mind", comment="Grew on me."))

        assert load_product(product_id).rating == 5.0

    def test_deleting_every_review_resets_the_aggregate(self, product_id, delivered_order, load_product):
        first = _review(product_id, delivered_order("cust-1"), customer_id="cust-1", rating=4)
        second = _review(product_id, delivered_order("cust-2"), customer_id="cust-2", rating=1)

        _process(DeleteReview(review_id=first))
        assert load_product(product_id).rating == 1.0

        _process(DeleteReview(review_id=second))
        product = load_product(product_id)
        assert product.rating == 0.0
        assert product.review_count == 0

    def test_unknown_review(self):
        with pytest.raises(ReviewNotFound):
            _process(DeleteReview(review_id="no-such-review"))

    def test_recompute_for_missing_product_is_harmless(self):
        assert RatingAggregator().recompute("vanished-product") is None

    def test_recompute_writes_the_summary(self, product_id, delivered_order, load_product):
        _review(product_id, delivered_order("cust-1"), customer_id="cust-1", rating=4)
        _review(product_id, delivered_order("cust-2"), customer_id="cust-2", rating=5)
        update_where(current_domain.repository_for(Product)._dao, {"id": product_id}, rating=0.0, review_count=0)

        assert RatingAggregator().recompute(product_id) == {"rating": 4.5, "review_count": 2}

        product = load_product(product_id)
        assert (product.rating, product.review_count) == (4.5, 2)


    def test_review_of_vanished_product_still_succeeds(self, delivered_order, product_id):
        order_id = delivered_order()

        review_id = _review("vanished-product", order_id)

        assert current_domain.repository_for(Review).get(review_id).product_id == "vanished-product"
