"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductCreated:
    """A new product was added to the catalog in draft status."""

    product_id: Identifier(required=True)
    name: String(required=True)
    stock_model: String(required=True)
    variant_count: Integer(default=0)
    created_at: DateTime(required=True)


@storefront.event(part_of="Product")
class ProductPublished:
    product_id: Identifier(required=True)
    published_at: DateTime(required=True)


@storefront.event(part_of="Product")
class ProductUnpublished:
    """The product left the storefront. Carts holding it drop it on next validation."""

    product_id: Identifier(required=True)
    unpublished_at: DateTime(required=True)
