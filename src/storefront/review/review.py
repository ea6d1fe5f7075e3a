"""Review aggregate: one customer's rating of a product bought in a given order."""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String, Text

from storefront.domain import storefront


def _check_content(rating, title, comment):
    errors = {}
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        errors["rating"] = ["Rating must be a whole number between 1 and 5"]
    if not title:
        errors["title"] = ["is required"]
    if not comment:
        errors["comment"] = ["is required"]
    if errors:
        raise ValidationError(errors)


@storefront.aggregate
class Review:
    product_id = Identifier(required=True)
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    customer_name = String(max_length=255)
    customer_email = String(max_length=255)
    rating = Integer(required=True, min_value=1, max_value=5)
    title = String(required=True, max_length=200)
    comment = Text(required=True)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def submit(
        cls,
        product_id,
        order_id,
        customer_id,
        rating,
        title,
        comment,
        customer_name=None,
        customer_email=None,
    ):
        from storefront.review.events import ReviewSubmitted

        _check_content(rating, title, comment)
        now = datetime.now(UTC)
        review = cls(
            product_id=product_id,
            order_id=order_id,
            customer_id=customer_id,
            customer_name=customer_name,
            customer_email=customer_email,
            rating=rating,
            title=title,
            comment=comment,
            created_at=now,
            updated_at=now,
        )
        review.raise_(
            ReviewSubmitted(
                review_id=review.id,
                product_id=product_id,
                customer_id=customer_id,
                rating=rating,
                submitted_at=now,
            )
        )
        return review

    def edit(self, rating, title, comment):
        from storefront.review.events import ReviewEdited

        _check_content(rating, title, comment)
        previous = self.rating
        self.rating = rating
        self.title = title
        self.comment = comment
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ReviewEdited(
                review_id=self.id,
                product_id=self.product_id,
                previous_rating=previous,
                new_rating=rating,
                edited_at=self.updated_at,
            )
        )

    def to_view(self) -> dict:
        return {
            "id": str(self.id),
            "product_id": str(self.product_id),
            "order_id": str(self.order_id),
            "customer_id": str(self.customer_id),
            "customer_name": self.customer_name,
            "rating": self.rating,
            "title": self.title,
            "comment": self.comment,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
