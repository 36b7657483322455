# storefront/main.py
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from redis import RedisError
from sqlalchemy.exc import SQLAlchemyError

from storefront.api.routers import addresses, auth, cart, catalog, health, orders, payment, reviews, wishlist
from storefront.data.seed import seed as seed_catalog
from storefront.domain.errors import (
    AuthorizationError,
    CheckoutInProgress,
    GatewayUnavailable,
    InvalidStatusTransition,
    NotAuthenticated,
    NotFound,
    OutOfStock,
    PaymentVerificationFailed,
    PersistenceError,
    StorefrontError,
    ValidationError,
)
from storefront.repos import build_storage_provider
from storefront.services.lock_service import LockService
from storefront.services.notification_service import NotificationService
from storefront.services.payment_gateway import RazorpayClient
from storefront.utils.logging import get_logger
from storefront.utils.settings import DATABASE_URL, SEED_CATALOG, STORAGE_BACKEND

logger = get_logger(__name__)

# subclasses resolve through their bases (AddressRequired -> ValidationError)
ERROR_STATUS_CODES: dict[type, int] = {
    ValidationError: 400,
    PaymentVerificationFailed: 400,
    NotAuthenticated: 401,
    AuthorizationError: 401,
    NotFound: 404,
    OutOfStock: 409,
    CheckoutInProgress: 409,
    InvalidStatusTransition: 409,
    GatewayUnavailable: 502,
    PersistenceError: 500,
}


def status_code_for(exc: StorefrontError) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[cls]
    return 500


def error_body(exc: StorefrontError) -> dict:
    return {"message": exc.message, "errorType": type(exc).__name__}


def create_app(
    storage_backend: str | None = None,
    database_url: str | None = None,
    seed: bool | None = None,
) -> FastAPI:
    backend = storage_backend or STORAGE_BACKEND
    provider = build_storage_provider(backend, database_url or DATABASE_URL)
    do_seed = SEED_CATALOG if seed is None else seed

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        provider.init_schema()
        if do_seed:
            with provider.session() as storage:
                seed_catalog(storage)
        logger.info(f"Storefront API ready, storage backend: {provider.name}")
        yield
        provider.dispose()

    app = FastAPI(
        title="Storefront API",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.storage_provider = provider
    app.state.gateway = RazorpayClient()
    app.state.lock_service = LockService()
    app.state.notifications = NotificationService()

    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
        status_code = status_code_for(exc)
        if status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=status_code, content=error_body(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(part) for part in first.get("loc", ())[1:])
        message = f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid request data")
        return JSONResponse(status_code=400, content=error_body(ValidationError(message)))

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.exception(f"{request.method} {request.url.path}: database error", exc_info=exc)
        return JSONResponse(status_code=500, content=error_body(PersistenceError()))

    @app.exception_handler(RedisError)
    async def redis_error_handler(request: Request, exc: RedisError) -> JSONResponse:
        logger.exception(f"{request.method} {request.url.path}: redis error", exc_info=exc)
        return JSONResponse(status_code=500, content=error_body(PersistenceError()))

    # Include routers
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(catalog.categories_router)
    app.include_router(catalog.products_router)
    app.include_router(catalog.search_router)
    app.include_router(cart.router)
    app.include_router(wishlist.router)
    app.include_router(addresses.router)
    app.include_router(orders.router)
    app.include_router(payment.checkout_router)
    app.include_router(payment.router)
    app.include_router(reviews.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
