"""Repository for the Product aggregate."""

from protean.exceptions import ObjectNotFoundError

from storefront.domain import storefront
from storefront.errors import ProductNotFound
from storefront.product.product import Product


@storefront.repository(part_of=Product)
class ProductRepository:
    def find(self, product_id) -> Product | None:
        """Return the product, or None when it does not exist."""
        if not product_id:
            return None
        try:
            return self.get(str(product_id))
        except ObjectNotFoundError:
            return None

    def get_or_raise(self, product_id) -> Product:
        product = self.find(product_id)
        if product is None:
            raise ProductNotFound(product_id)
        return product
