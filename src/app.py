"""Storefront FastAPI application.

Web server that processes storefront commands synchronously via HTTP. Every
request runs inside the storefront domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from uuid import uuid4

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the domain.toml overlay (memory stores by default,
# PostgreSQL under "production").
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from storefront.domain import storefront
from storefront.utils.logging import add_context, clear_context

storefront.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront API",
    description="Order & inventory consistency core: catalog stock, carts, orders and reviews",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the storefront domain context and a request id for each request."""
    clear_context()
    request_id = request.headers.get("X-Request-ID") or uuid4().hex
    add_context(request_id=request_id, path=request.url.path)

    with storefront.domain_context():
        response = await call_next(request)

    response.headers["X-Request-ID"] = request_id
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from storefront.api import cart_router, order_router, product_router, review_router  # noqa: E402
from storefront.api.errors import register_error_handlers  # noqa: E402

register_error_handlers(app)

app.include_router(product_router)
app.include_router(cart_router)
app.include_router(order_router)
app.include_router(review_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": storefront.name})
