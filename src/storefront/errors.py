"""Error taxonomy for the storefront core.

User-correctable input problems are raised as ``protean.exceptions.ValidationError``
with a field -> messages mapping. Everything else a caller may need to react to
is one of the classes below. Each carries a machine-readable ``kind`` and the
HTTP status the API layer maps it to.
"""


class StorefrontError(Exception):
    kind = "InternalError"
    status_code = 500

    def __init__(self, message: str = "", **details):
        super().__init__(message)
        self.message = message or self.__class__.__name__
        self.details = details

    def to_dict(self) -> dict:
        return {"error": self.kind, "message": self.message, "details": self.details}


class InternalError(StorefrontError):
    pass


class UnauthorizedError(StorefrontError):
    kind = "Unauthorized"
    status_code = 401


# ---------------------------------------------------------------------------
# Not found
# ---------------------------------------------------------------------------
class NotFoundError(StorefrontError):
    kind = "NotFound"
    status_code = 404


class ProductNotFound(NotFoundError):
    def __init__(self, product_id):
        super().__init__(f"Product {product_id} not found", product_id=str(product_id))


class VariantNotFound(NotFoundError):
    kind = "VariantNotFound"

    def __init__(self, product_id, variant):
        super().__init__(
            f"Variant '{variant}' not found on product {product_id}",
            product_id=str(product_id),
            variant=variant,
        )


class OrderNotFound(NotFoundError):
    def __init__(self, order_id):
        super().__init__(f"Order {order_id} not found", order_id=str(order_id))


class ReviewNotFound(NotFoundError):
    def __init__(self, review_id):
        super().__init__(f"Review {review_id} not found", review_id=str(review_id))


class CartNotFound(NotFoundError):
    def __init__(self, user_id):
        super().__init__(f"No cart for user {user_id}", user_id=str(user_id))


# ---------------------------------------------------------------------------
# Conflicts
# ---------------------------------------------------------------------------
class ConflictError(StorefrontError):
    kind = "Conflict"
    status_code = 409


class InsufficientStock(ConflictError):
    kind = "InsufficientStock"

    def __init__(self, product_id, variant, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for variant '{variant}': requested {requested}, available {available}",
            product_id=str(product_id),
            variant=variant,
            requested=requested,
            available=available,
        )
        self.requested = requested
        self.available = available


class DuplicateOrderNumber(ConflictError):
    kind = "DuplicateOrderNumber"

    def __init__(self, day: str, attempts: int):
        super().__init__(
            f"Could not allocate a unique order number for {day} after {attempts} attempts",
            day=day,
            attempts=attempts,
        )


class DuplicateReview(ConflictError):
    def __init__(self, product_id, order_id):
        super().__init__(
            "You have already reviewed this product for this order",
            product_id=str(product_id),
            order_id=str(order_id),
        )


class CartChanged(ConflictError):
    kind = "CartChanged"

    def __init__(self, changes: list[dict]):
        super().__init__("Cart was updated to match current stock, review it before checkout", changes=changes)
        self.changes = changes
