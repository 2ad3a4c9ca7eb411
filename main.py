from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from shared.config.database import engine, Base
from shared.config.settings import SERVICE_NAME
from shared.errors import OrderError, OrderValidationError, violations_from_errors
from shared.observability import setup_observability
from shared.security import limiter

# IMPORTANT: import models so they register with Base
from services.user_service import models as user_models  # noqa: F401
from services.product_service import models as product_models  # noqa: F401
from services.invoice_service import models as invoice_models  # noqa: F401

from services.auth_service.router import router as auth_router
from services.user_service.router import router as users_router, roles_router
from services.product_service.router import router as products_router
from services.invoice_service.router import router as invoices_router, details_router

app = FastAPI(
    title="Invoicing API",
    version="1.0.0",
    description="Users, roles, product catalog and stock-reserving invoice intake.",
)

# --- OBSERVABILITY BOOTSTRAP ---
setup_observability(app, SERVICE_NAME)

# --- SECURITY SETUP ---
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(OrderError)
async def order_error_handler(request: Request, exc: OrderError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Malformed input is a 400 across the whole API, same shape as intake validation
    error = OrderValidationError(violations_from_errors(exc.errors()))
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.on_event("startup")
async def startup_event():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@app.get("/health", include_in_schema=False)
async def health_check():
    return {"service": SERVICE_NAME, "status": "running"}


app.include_router(auth_router)
app.include_router(users_router)
app.include_router(roles_router)
app.include_router(products_router)
app.include_router(invoices_router)
app.include_router(details_router)
