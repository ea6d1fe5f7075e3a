"""Domain events for the Review aggregate."""

from protean.fields import DateTime, Identifier, Integer

from storefront.domain import storefront


@storefront.event(part_of="Review")
class ReviewSubmitted:
    review_id: Identifier(required=True)
    product_id: Identifier(required=True)
    customer_id: Identifier(required=True)
    rating: Integer(required=True)
    submitted_at: DateTime(required=True)


@storefront.event(part_of="Review")
class ReviewEdited:
    review_id: Identifier(required=True)
    product_id: Identifier(required=True)
    previous_rating: Integer(required=True)
    new_rating: Integer(required=True)
    edited_at: DateTime(required=True)
