from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text

from shared.config.database import engine, Base
from shared.config.settings import STORAGE_BACKEND
from shared.errors import StorefrontError, ValidationError
from shared.observability import setup_observability
from shared.security import limiter

# IMPORTANT: import models so they register with Base
from shared.storage import models as storage_models  # noqa: F401

from services.catalog_service.router import public_router as catalog_router, admin_router as catalog_admin_router
from services.checkout_service.router import router as checkout_router
from services.order_service.router import router as order_router, admin_router as order_admin_router, admin_panel_router
from services.wallet_service.router import router as wallet_router

app = FastAPI(title="Storefront Orders", version="1.0.0")

# --- OBSERVABILITY BOOTSTRAP ---
setup_observability(app, "storefront_orders")

# --- SECURITY SETUP ---
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    """Map StorefrontError subclasses to their HTTP status and error code."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Answer malformed request bodies with the same envelope as ValidationError."""
    first = exc.errors()[0]
    loc = [str(part) for part in first.get("loc", ()) if part != "body"]
    error = ValidationError(loc[-1] if loc else "body", first.get("msg", "Invalid request"))
    return JSONResponse(status_code=error.status_code, content=error.to_dict())

@app.on_event("startup")
async def startup_event():
    if STORAGE_BACKEND != "sql":
        return
    async with engine.begin() as conn:
        await conn.execute(text("CREATE SCHEMA IF NOT EXISTS storefront_schema"))
        await conn.run_sync(Base.metadata.create_all)

@app.get("/health")
async def health_check():
    return {"service": "storefront_orders", "status": "running", "storage": STORAGE_BACKEND}

app.include_router(checkout_router, prefix="/orders", tags=["Checkout"])
app.include_router(order_router, prefix="/orders", tags=["Orders"])
app.include_router(order_admin_router, prefix="/orders", tags=["Orders (admin)"])
app.include_router(admin_panel_router, prefix="/admin/orders", tags=["Orders (admin)"])
app.include_router(wallet_router, prefix="/wallet", tags=["Wallet"])
app.include_router(catalog_router, prefix="/products", tags=["Catalog"])
app.include_router(catalog_admin_router, prefix="/products", tags=["Catalog (admin)"])
