"""Pydantic request/response schemas for the storefront API.

These are external contracts, separate from the internal Protean commands.
Business rules (required order fields, totals, stock) are checked by the
domain so that every violation comes back in the same error shape; the
schemas only pin down types.
"""

from typing import Any

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------
class ErrorResponse(BaseModel):
    error: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


class StatusResponse(BaseModel):
    status: str = "ok"


# ---------------------------------------------------------------------------
# Products & inventory
# ---------------------------------------------------------------------------
class VariantSchema(BaseModel):
    name: str
    stock: int = Field(ge=0, default=0)
    in_stock: bool | None = None


class CreateProductRequest(BaseModel):
    name: str
    price: str
    original_price: str | None = None
    description: str | None = None
    category: str | None = None
    stock_model: str = "per_variant"
    variants: list[VariantSchema] = Field(default_factory=list)
    in_stock: bool = False

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Linen Shirt",
                    "price": "AED 149.00",
                    "stock_model": "per_variant",
                    "variants": [{"name": "White", "stock": 10}, {"name": "Navy", "stock": 4}],
                }
            ]
        }
    }


class ProductResponse(BaseModel):
    id: str
    name: str
    price: str
    original_price: str | None = None
    description: str | None = None
    category: str | None = None
    status: str
    stock_model: str
    in_stock: bool
    variants: list[VariantSchema]
    rating: float
    review_count: int


class SetAvailabilityRequest(BaseModel):
    in_stock: bool


class InventoryChangeRequest(BaseModel):
    variant: str | None = None
    quantity: int | None = None


class InventoryChangeResponse(BaseModel):
    updated_variant: VariantSchema
    remaining: int
    aggregate_stock: int
    in_stock: bool


class AvailabilityResponse(BaseModel):
    available: int
    is_in_stock: bool


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class CartItemRequest(BaseModel):
    product_id: str
    variant: str = ""
    quantity: int = 1


class CartLineSchema(BaseModel):
    product_id: str
    product_name: str | None = None
    variant: str = ""
    quantity: int
    unit_price: float


class CartSchema(BaseModel):
    user_id: str
    items: list[CartLineSchema]
    updated_at: str | None = None


class CartResponse(BaseModel):
    cart: CartSchema | None = None
    total: float = 0.0


class CartChangeSchema(BaseModel):
    type: str
    product_id: str
    product_name: str | None = None
    variant: str | None = None
    from_qty: int | None = None
    to_qty: int | None = None
    reason: str


class CartValidationResponse(CartResponse):
    ok: bool
    changes: list[CartChangeSchema]


class CheckoutRequest(BaseModel):
    customer_name: str
    customer_email: str
    shipping_address: str
    tax: float = Field(ge=0, default=0.0)
    notes: str | None = None


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class OrderItemSchema(BaseModel):
    product_id: str | None = None
    product_name: str | None = None
    variant: str = ""
    unit_price: float | None = None
    quantity: int | None = None
    line_total: float | None = None


class CreateOrderRequest(BaseModel):
    customer_id: str | None = None
    customer_name: str | None = None
    customer_email: str | None = None
    shipping_address: str | None = None
    items: list[OrderItemSchema] | None = None
    subtotal: float | None = None
    tax: float | None = None
    total_amount: float | None = None
    notes: str | None = None


class UpdateOrderRequest(BaseModel):
    """Only these fields are writable after creation; anything else in the body is dropped."""

    status: str | None = None
    payment_status: str | None = None
    tracking_number: str | None = None
    notes: str | None = None


class OrderResponse(BaseModel):
    id: str
    order_number: str
    customer_id: str
    customer_name: str
    customer_email: str
    shipping_address: str
    items: list[OrderItemSchema]
    subtotal: float
    tax: float
    total_amount: float
    status: str
    payment_status: str
    tracking_number: str | None = None
    notes: str | None = None
    cancellation_note: str
    delivered_at: str | None = None
    order_date: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------
class SubmitReviewRequest(BaseModel):
    product_id: str | None = None
    order_id: str | None = None
    customer_id: str | None = None
    customer_name: str | None = None
    customer_email: str | None = None
    rating: int | None = None
    title: str | None = None
    comment: str | None = None


class EditReviewRequest(BaseModel):
    rating: int | None = None
    title: str | None = None
    comment: str | None = None


class ReviewResponse(BaseModel):
    id: str
    product_id: str
    order_id: str
    customer_id: str
    customer_name: str | None = None
    rating: int
    title: str
    comment: str
    created_at: str | None = None
    updated_at: str | None = None
