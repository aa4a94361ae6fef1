import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from quoteforge.api import customers, dev, health, products, quotes, settings as settings_api
from quoteforge.core.config import get_settings
from quoteforge.core.errors import QuoteForgeError

logger = logging.getLogger(__name__)


async def quoteforge_error_handler(request: Request, exc: QuoteForgeError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL)
    app = FastAPI(title="QuoteForge", version="0.1.0")

    app.add_exception_handler(QuoteForgeError, quoteforge_error_handler)  # type: ignore[arg-type]

    # Routers
    app.include_router(health.router, tags=["health"])
    app.include_router(customers.router, prefix="/customers", tags=["customers"])
    app.include_router(products.router, prefix="/products", tags=["products"])
    app.include_router(quotes.router, prefix="/quotes", tags=["quotes"])
    app.include_router(settings_api.router, prefix="/settings", tags=["settings"])
    app.include_router(dev.router, prefix="/dev", tags=["dev"])

    return app


app = create_app()
