"""Repository for the Review aggregate."""

from protean.exceptions import ObjectNotFoundError

from storefront.domain import storefront
from storefront.errors import ReviewNotFound
from storefront.review.review import Review

PAGE_SIZE = 500


@storefront.repository(part_of=Review)
class ReviewRepository:
    def get_or_raise(self, review_id) -> Review:
        try:
            return self.get(str(review_id))
        except ObjectNotFoundError:
            raise ReviewNotFound(review_id)

    def for_product(self, product_id) -> list[Review]:
        query = self._dao.query.filter(product_id=str(product_id)).order_by("created_at")
        reviews, offset = [], 0
        while True:
            page = query.offset(offset).limit(PAGE_SIZE).all().items
            reviews.extend(page)
            if len(page) < PAGE_SIZE:
                return reviews
            offset += PAGE_SIZE

    def exists_for(self, product_id, order_id, customer_id) -> bool:
        matches = self._dao.query.filter(
            product_id=str(product_id),
            order_id=str(order_id),
            customer_id=str(customer_id),
        ).all()
        return matches.total > 0

    def search(self, product_id=None, order_id=None, customer_id=None) -> list[Review]:
        criteria = {
            key: str(value)
            for key, value in (("product_id", product_id), ("order_id", order_id), ("customer_id", customer_id))
            if value
        }
        query = self._dao.query
        if criteria:
            query = query.filter(**criteria)
        return query.order_by("-created_at").all().items

    def delete_review(self, review: Review) -> None:
        self._dao.delete(review)
