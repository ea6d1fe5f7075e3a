"""Review submission, editing and deletion: commands and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.errors import DuplicateReview
from storefront.order.order import Order
from storefront.review.rating import RatingAggregator
from storefront.review.review import Review


@storefront.command(part_of="Review")
class SubmitReview:
    product_id = Identifier()
    order_id = Identifier()
    customer_id = Identifier()
    customer_name = String(max_length=255)
    customer_email = String(max_length=255)
    rating = Integer()
    title = String(max_length=200)
    comment = Text()


@storefront.command(part_of="Review")
class EditReview:
    review_id = Identifier(required=True)
    rating = Integer()
    title = String(max_length=200)
    comment = Text()


@storefront.command(part_of="Review")
class DeleteReview:
    review_id = Identifier(required=True)


def _check_eligibility(command) -> None:
    missing = [
        field
        for field in ("product_id", "order_id", "customer_id", "rating", "title", "comment")
        if getattr(command, field) in (None, "")
    ]
    if missing:
        raise ValidationError({field: ["is required"] for field in missing})

    order = current_domain.repository_for(Order).get_or_raise(command.order_id)
    if not order.is_delivered:
        raise ValidationError({"order_id": ["Can only review delivered orders"]})
    if not order.is_paid:
        raise ValidationError({"order_id": ["Can only review paid orders"]})

    if current_domain.repository_for(Review).exists_for(command.product_id, command.order_id, command.customer_id):
        raise DuplicateReview(command.product_id, command.order_id)


@storefront.command_handler(part_of=Review)
class ReviewHandler:
    @handle(SubmitReview)
    def submit_review(self, command):
        _check_eligibility(command)

        review = Review.submit(
            product_id=command.product_id,
            order_id=command.order_id,
            customer_id=command.customer_id,
            customer_name=command.customer_name,
            customer_email=command.customer_email,
            rating=command.rating,
            title=command.title,
            comment=command.comment,
        )
        current_domain.repository_for(Review).add(review)
        RatingAggregator().recompute(review.product_id)
        return str(review.id)

    @handle(EditReview)
    def edit_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get_or_raise(command.review_id)
        review.edit(command.rating, command.title, command.comment)
        repo.add(review)
        RatingAggregator().recompute(review.product_id)
        return str(review.id)

    @handle(DeleteReview)
    def delete_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.get_or_raise(command.review_id)
        product_id = review.product_id
        repo.delete_review(review)
        RatingAggregator().recompute(product_id)
