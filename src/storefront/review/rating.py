"""Rating Aggregator: keeps Product.rating and Product.review_count in step with reviews.

Called explicitly after every review write. The figures are a derived cache:
a failed recompute is logged and left for the next write to fix, and never
fails the review operation that triggered it.
"""

from decimal import ROUND_HALF_UP, Decimal

import structlog
from protean.utils.globals import current_domain

from storefront.product.product import Product
from storefront.review.review import Review
from storefront.shared.guarded import update_where

logger = structlog.get_logger(__name__)


def average_rating(ratings: list[int]) -> float:
    """Mean of ``ratings`` rounded half-up to one decimal place, 0.0 when empty."""
    if not ratings:
        return 0.0
    mean = Decimal(sum(ratings)) / Decimal(len(ratings))
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


class RatingAggregator:
    def recompute(self, product_id) -> dict | None:
        try:
            ratings = [r.rating for r in current_domain.repository_for(Review).for_product(product_id)]
            summary = {"rating": average_rating(ratings), "review_count": len(ratings)}

            products = current_domain.repository_for(Product)
            matched = update_where(products._dao, {"id": str(product_id)}, **summary)
            if not matched:
                logger.warning("Rating recompute skipped, product missing", product_id=str(product_id))
                return None

            logger.info("Product rating updated", product_id=str(product_id), **summary)
            return summary
        except Exception as e:
            logger.error("Error updating product rating", product_id=str(product_id), error=str(e), exc_info=True)
            return None
