"""FastAPI routes for the storefront: catalog, inventory, carts, orders and reviews."""

import json
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.api.dependencies import current_user
from storefront.api.schemas import (
    AvailabilityResponse,
    CartItemRequest,
    CartResponse,
    CartValidationResponse,
    CheckoutRequest,
    CreateOrderRequest,
    CreateProductRequest,
    EditReviewRequest,
    InventoryChangeRequest,
    InventoryChangeResponse,
    OrderResponse,
    ProductResponse,
    ReviewResponse,
    SetAvailabilityRequest,
    StatusResponse,
    SubmitReviewRequest,
    UpdateOrderRequest,
)
from storefront.cart.cart import Cart
from storefront.cart.items import AddToCart, RemoveFromCart, UpdateCartItem
from storefront.cart.reconciliation import ValidateCart, cart_snapshot
from storefront.errors import CartChanged
from storefront.inventory.adjustment import DecrementInventory, RestockInventory
from storefront.inventory.ledger import get_ledger
from storefront.order.checkout import CheckoutCart
from storefront.order.creation import CreateOrder
from storefront.order.lifecycle import UpdateOrder
from storefront.order.order import Order, order_view
from storefront.product.management import CreateProduct, PublishProduct, SetProductAvailability, UnpublishProduct
from storefront.product.product import Product
from storefront.review.review import Review
from storefront.review.submission import DeleteReview, EditReview, SubmitReview


def _product_view(product: Product) -> ProductResponse:
    return ProductResponse(
        id=str(product.id),
        name=product.name,
        price=product.price,
        original_price=product.original_price,
        description=product.description,
        category=product.category,
        status=product.status,
        stock_model=product.stock_model,
        in_stock=bool(product.in_stock),
        variants=[{"name": v.name, "stock": v.stock or 0, "in_stock": bool(v.in_stock)} for v in product.variants],
        rating=product.rating or 0.0,
        review_count=product.review_count or 0,
    )


def _load_product(product_id: str) -> ProductResponse:
    return _product_view(current_domain.repository_for(Product).get_or_raise(product_id))


def _load_order(order_id: str) -> OrderResponse:
    return OrderResponse(**order_view(current_domain.repository_for(Order).reload(order_id)))


def _parse_date(value: str | None, field: str) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise ValidationError({field: ["Must be an ISO 8601 date"]})


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.post("", status_code=201, response_model=ProductResponse)
async def create_product(body: CreateProductRequest) -> ProductResponse:
    command = CreateProduct(
        name=body.name,
        price=body.price,
        original_price=body.original_price,
        description=body.description,
        category=body.category,
        stock_model=body.stock_model,
        variants=json.dumps([v.model_dump(exclude={"in_stock"}) for v in body.variants]),
        in_stock=body.in_stock,
    )
    product_id = current_domain.process(command, asynchronous=False)
    return _load_product(product_id)


@product_router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str) -> ProductResponse:
    return _load_product(product_id)


@product_router.put("/{product_id}/publish", response_model=ProductResponse)
async def publish_product(product_id: str) -> ProductResponse:
    current_domain.process(PublishProduct(product_id=product_id), asynchronous=False)
    return _load_product(product_id)


@product_router.put("/{product_id}/unpublish", response_model=ProductResponse)
async def unpublish_product(product_id: str) -> ProductResponse:
    current_domain.process(UnpublishProduct(product_id=product_id), asynchronous=False)
    return _load_product(product_id)


@product_router.put("/{product_id}/availability", response_model=ProductResponse)
async def set_availability(product_id: str, body: SetAvailabilityRequest) -> ProductResponse:
    command = SetProductAvailability(product_id=product_id, in_stock=body.in_stock)
    current_domain.process(command, asynchronous=False)
    return _load_product(product_id)


@product_router.get("/{product_id}/inventory", response_model=AvailabilityResponse)
async def check_availability(product_id: str, variant: str = Query(...)) -> AvailabilityResponse:
    return AvailabilityResponse(**get_ledger().check_availability(product_id, variant))


@product_router.put("/{product_id}/inventory", response_model=InventoryChangeResponse)
async def decrement_inventory(product_id: str, body: InventoryChangeRequest) -> InventoryChangeResponse:
    command = DecrementInventory(product_id=product_id, variant=body.variant, quantity=body.quantity)
    result = current_domain.process(command, asynchronous=False)
    return InventoryChangeResponse(**result)


@product_router.put("/{product_id}/restock", response_model=InventoryChangeResponse)
async def restock_inventory(product_id: str, body: InventoryChangeRequest) -> InventoryChangeResponse:
    command = RestockInventory(product_id=product_id, variant=body.variant, quantity=body.quantity)
    result = current_domain.process(command, asynchronous=False)
    return InventoryChangeResponse(**result)


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


def _cart_response(user_id: str) -> CartResponse:
    cart = current_domain.repository_for(Cart).find_for_user(user_id)
    return CartResponse(**cart_snapshot(cart))


@cart_router.get("", response_model=CartResponse)
async def get_cart(user_id: str = Depends(current_user)) -> CartResponse:
    return _cart_response(user_id)


@cart_router.post("/items", response_model=CartResponse)
async def add_cart_item(body: CartItemRequest, user_id: str = Depends(current_user)) -> CartResponse:
    command = AddToCart(
        user_id=user_id,
        product_id=body.product_id,
        variant=body.variant,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(user_id)


@cart_router.put("/items", response_model=CartResponse)
async def update_cart_item(body: CartItemRequest, user_id: str = Depends(current_user)) -> CartResponse:
    command = UpdateCartItem(
        user_id=user_id,
        product_id=body.product_id,
        variant=body.variant,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_response(user_id)


@cart_router.delete("/items", response_model=CartResponse)
async def remove_cart_item(
    product_id: str,
    variant: str | None = None,
    user_id: str = Depends(current_user),
) -> CartResponse:
    command = RemoveFromCart(user_id=user_id, product_id=product_id, variant=variant)
    current_domain.process(command, asynchronous=False)
    return _cart_response(user_id)


@cart_router.post("/validate", response_model=CartValidationResponse)
async def validate_cart(user_id: str = Depends(current_user)) -> CartValidationResponse:
    result = current_domain.process(ValidateCart(user_id=user_id), asynchronous=False)
    return CartValidationResponse(**result)


@cart_router.post("/checkout", status_code=201, response_model=OrderResponse)
async def checkout_cart(body: CheckoutRequest, user_id: str = Depends(current_user)) -> OrderResponse:
    """Place an order from the caller's cart.

    1. Reconcile the cart (corrections are saved and returned as a 409)
    2. Create the order from the reconciled lines, taking stock
    3. Empty the cart
    """
    validation = current_domain.process(ValidateCart(user_id=user_id), asynchronous=False)
    if validation["changes"]:
        raise CartChanged(validation["changes"])

    command = CheckoutCart(
        user_id=user_id,
        customer_name=body.customer_name,
        customer_email=body.customer_email,
        shipping_address=body.shipping_address,
        tax=body.tax,
        notes=body.notes,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return _load_order(order_id)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderResponse)
async def create_order(body: CreateOrderRequest) -> OrderResponse:
    items = [item.model_dump() for item in body.items] if body.items is not None else None
    command = CreateOrder(
        customer_id=body.customer_id,
        customer_name=body.customer_name,
        customer_email=body.customer_email,
        shipping_address=body.shipping_address,
        items=json.dumps(items) if items is not None else None,
        subtotal=body.subtotal,
        tax=body.tax,
        total_amount=body.total_amount,
        notes=body.notes,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return _load_order(order_id)


@order_router.get("", response_model=list[OrderResponse])
async def list_customer_orders(customer_id: str | None = None, status: str | None = None) -> list[OrderResponse]:
    if not customer_id:
        raise ValidationError({"customer_id": ["is required"]})
    orders = current_domain.repository_for(Order).for_customer(customer_id, status=status)
    return [OrderResponse(**order_view(o)) for o in orders]


@order_router.get("/admin", response_model=list[OrderResponse])
async def list_orders(
    status: str | None = None,
    payment_status: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
) -> list[OrderResponse]:
    orders = current_domain.repository_for(Order).search(
        status=status,
        payment_status=payment_status,
        start=_parse_date(start_date, "start_date"),
        end=_parse_date(end_date, "end_date"),
    )
    return [OrderResponse(**order_view(o)) for o in orders]


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    return _load_order(order_id)


@order_router.put("/{order_id}", response_model=OrderResponse)
async def update_order(order_id: str, body: UpdateOrderRequest) -> OrderResponse:
    command = UpdateOrder(order_id=order_id, **body.model_dump())
    current_domain.process(command, asynchronous=False)
    return _load_order(order_id)


# ---------------------------------------------------------------------------
# Review Router
# ---------------------------------------------------------------------------
review_router = APIRouter(prefix="/reviews", tags=["reviews"])


def _load_review(review_id: str) -> ReviewResponse:
    return ReviewResponse(**current_domain.repository_for(Review).get_or_raise(review_id).to_view())


@review_router.post("", status_code=201, response_model=ReviewResponse)
async def submit_review(body: SubmitReviewRequest) -> ReviewResponse:
    review_id = current_domain.process(SubmitReview(**body.model_dump()), asynchronous=False)
    return _load_review(review_id)


@review_router.put("/{review_id}", response_model=ReviewResponse)
async def edit_review(review_id: str, body: EditReviewRequest) -> ReviewResponse:
    current_domain.process(EditReview(review_id=review_id, **body.model_dump()), asynchronous=False)
    return _load_review(review_id)


@review_router.delete("/{review_id}", response_model=StatusResponse)
async def delete_review(review_id: str) -> StatusResponse:
    current_domain.process(DeleteReview(review_id=review_id), asynchronous=False)
    return StatusResponse()


@review_router.get("", response_model=list[ReviewResponse])
async def list_reviews(
    product_id: str | None = None,
    order_id: str | None = None,
    customer_id: str | None = None,
) -> list[ReviewResponse]:
    reviews = current_domain.repository_for(Review).search(
        product_id=product_id,
        order_id=order_id,
        customer_id=customer_id,
    )
    return [ReviewResponse(**r.to_view()) for r in reviews]
