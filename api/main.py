from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from core import db
from core.config import get_settings
from core.errors import ApiError, InternalError, ValidationError, render, violations
from core.logging import setup_logging
from feeds import router as feeds_router
from profiles import router as profiles_router

logger = logging.getLogger(__name__)

settings = get_settings()
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Initialize the DB pool once per process.
    await db.init_pool(settings)
    try:
        yield
    finally:
        await db.close_pool()


app = FastAPI(
    title="Blue Collar Workers API",
    version="1.2.0",
    lifespan=lifespan,
    docs_url="/api-docs",
    openapi_url="/api-docs.json",
    redoc_url=None,
    swagger_ui_parameters={"tryItOutEnabled": True, "validatorUrl": None},
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ApiError)
async def api_error_handler(_: Request, exc: ApiError):
    return render(exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(_: Request, exc: RequestValidationError):
    # Query and path parameters FastAPI rejects before the handler runs.
    return render(ValidationError("Validation error", errors=violations(list(exc.errors()))))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled_exception method=%s path=%s", request.method, request.url.path)
    return render(InternalError("An unexpected error occurred while processing your request"))


app.include_router(profiles_router.router, prefix="/api", tags=["profiles"])
app.include_router(feeds_router.router, prefix="/api", tags=["feeds"])


@app.get("/")
def root(request: Request) -> dict:
    return {
        "success": True,
        "message": "Blue Collar Workers API is running!",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "documentation": f"{str(request.base_url).rstrip('/')}/api-docs",
    }


def serve() -> None:
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    serve()
