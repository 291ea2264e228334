import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.config import settings
from storefront.database import create_db_and_tables
from storefront.errors import (
    InvalidTransitionError,
    NotServiceableError,
    OrderNotFoundError,
    PaymentVerificationError,
    PersistenceConflictError,
    ProductNotFoundError,
    StorefrontError,
    ValidationError,
    ZoneNotFoundError,
)
from storefront.routes import (
    admin_orders,
    health,
    orders,
    payments,
    shipping,
    site_settings,
)

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Run DB creation ONLY in local
    if settings.env == "local":
        create_db_and_tables()
    yield

app = FastAPI(title="Storefront Orders & Shipping API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Map exception types to HTTP status codes
ERROR_STATUS_CODES = {
    ValidationError: 422,
    NotServiceableError: 400,
    InvalidTransitionError: 400,
    PaymentVerificationError: 400,
    PersistenceConflictError: 409,
    OrderNotFoundError: 404,
    ProductNotFoundError: 404,
    ZoneNotFoundError: 404,
}


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    return JSONResponse(
        status_code=ERROR_STATUS_CODES.get(type(exc), 500),
        content=exc.to_detail(),
    )


app.include_router(shipping.router, prefix="/shipping", tags=["Shipping"])
app.include_router(orders.router, prefix="/orders", tags=["Orders"])
app.include_router(admin_orders.router, prefix="/admin/orders", tags=["Admin Orders"])
app.include_router(payments.router, prefix="/payments", tags=["Payments"])
app.include_router(site_settings.public_router, prefix="/settings", tags=["Settings"])
app.include_router(site_settings.admin_router, prefix="/admin/settings", tags=["Admin Settings"])
app.include_router(health.router, prefix="/health", tags=["Health"])


@app.get("/")
def root():
    return {
        "shipping_endpoints": [
            "/shipping/calculate", "/shipping/detect-zone", "/shipping/info",
            "/shipping/zones", "/shipping/zones/{zone_id}", "/shipping/config",
            "/shipping/validate-address", "/shipping/check-serviceability",
        ],
        "order_endpoints": [
            "/orders", "/orders/{order_id}", "/orders/{order_id}/tracking",
            "/orders/{order_id}/cancel",
            "/orders/track/{order_number}",
        ],
        "admin_order_endpoints": [
            "/admin/orders", "/orders/{order_id}/status",
            "/orders/{order_id}/payment-status", "/orders/{order_id}/tracking-number",
            "/orders/{order_id}/notes",
        ],
        "payment_endpoints": ["/payments/create-order", "/payments/verify"],
    }
