from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
import time
import logging

from cafeshift import __version__
from cafeshift.core.config import settings
from cafeshift.core.database import engine, Base
from cafeshift.api.v1.router import api_router
from cafeshift.api.v1.endpoints import health
from cafeshift.core.logging_config import setup_logging
import cafeshift.models  # noqa: F401  registers tables on Base.metadata

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)
access_logger = logging.getLogger("access")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting CafeShift API server...")
    if settings.CREATE_TABLES_ON_STARTUP:
        # Normally the schema comes from Alembic migrations
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created")
    logger.info("CafeShift API server started successfully")
    yield
    # Shutdown
    logger.info("Shutting down CafeShift API server...")
    await engine.dispose()


app = FastAPI(
    title="CafeShift API",
    description="Cafe scheduling, shift trading, time-off and payroll API",
    version=__version__,
    lifespan=lifespan,
)


@app.middleware("http")
async def access_log_middleware(request: Request, call_next):
    started = time.perf_counter()
    client = request.client.host if request.client else "-"
    route = f"{request.method} {request.url.path}"
    try:
        response = await call_next(request)
    except Exception:
        logger.exception(f"{route} failed after {time.perf_counter() - started:.3f}s (client {client})")
        raise
    access_logger.info(f"{route} {response.status_code} {time.perf_counter() - started:.3f}s client={client}")
    return response


# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _strip_location(field: str) -> str:
    for prefix in ("body -> ", "query -> ", "path -> "):
        if field.startswith(prefix):
            return field[len(prefix):]
    return field


def _field_error(error: dict) -> dict:
    field = _strip_location(" -> ".join(str(loc) for loc in error["loc"]))
    kind = error["type"]
    if kind == "missing":
        message = f"{field} is required"
    elif kind == "value_error":
        message = f"{field}: {error['msg']}"
    else:
        message = error["msg"]
    return {"field": field, "message": message, "type": kind}


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Per-field validation errors, reported as 400."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": "Validation error",
            "errors": [_field_error(e) for e in exc.errors()],
            "message": "The request contains invalid or missing fields.",
        },
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Mirror `detail` into `message` so clients can read either."""
    content = {"detail": exc.detail}
    if isinstance(exc.detail, str):
        content["message"] = exc.detail
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


# Include routers
app.include_router(api_router, prefix="/api")
app.include_router(health.router, tags=["health"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
