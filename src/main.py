import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.core.config import settings
from src.core.logging import setup_logging

setup_logging(settings.debug)

from src.api.middleware.cors import setup_cors
from src.api.middleware.request_id import RequestIdMiddleware
from src.api.routes import cart, coupons, customization, health, product_gifts, products

logger = logging.getLogger(__name__)

try:
    settings.validate_secrets()
except ValueError as e:
    logger.critical("Secret validation failed: %s", e)
    raise SystemExit(f"FATAL: {e}") from e


app = FastAPI(
    title="OptyShop Cart API",
    version="1.0.0",
)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    detail = str(exc) if settings.debug else "Internal server error"
    return JSONResponse(status_code=500, content={"detail": detail})


setup_cors(app)
app.add_middleware(RequestIdMiddleware)

app.include_router(health.router, prefix="/api")
app.include_router(cart.router, prefix="/api")
app.include_router(products.router, prefix="/api")
app.include_router(customization.router, prefix="/api")
app.include_router(product_gifts.router, prefix="/api")
app.include_router(coupons.router, prefix="/api")
