"""FastAPI application factory"""

import logging
import time
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from src.api.error import register_exception_handlers
from src.api.routes import credits, payments, pricing, redeem, registrations

logger = logging.getLogger(__name__)


def create_app(config) -> FastAPI:
    """
    Build the application

    Args:
        config: ApplicationConfig (or any object with the same attributes)

    Returns:
        Configured FastAPI app with every router mounted under API_PREFIX
    """
    logging.basicConfig(
        level=getattr(logging, str(config.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="File Credits Service",
        description="Credits, paid downloads, redeem codes, payments and registrations for a file-sharing host",
        version="1.0.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=config.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if config.ENABLE_LOGGING_MIDDLEWARE:
        @app.middleware("http")
        async def log_requests(request: Request, call_next):
            started = time.perf_counter()
            response = await call_next(request)
            elapsed_ms = int((time.perf_counter() - started) * 1000)
            logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms}ms)")
            return response

    register_exception_handlers(app)

    for module in (pricing, redeem, credits, payments, registrations):
        app.include_router(module.router, prefix=config.API_PREFIX)

    @app.get("/health", tags=["Health"])
    async def health_check():
        return {"status": "ok"}

    return app
