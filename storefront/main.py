import uvicorn as uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from fastapi.middleware.cors import CORSMiddleware
from fastapi_limiter import FastAPILimiter
import redis.asyncio as redis
import logging

from storefront.config.settings import settings
from storefront.config.database import startDB
from storefront.commonUtils.exceptions import StoreError
from storefront.dependencies.rateLimitDependencies import rate_limit
from storefront.routes import userRoute, productRoute, cartRoute, checkOutRoute

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


async def ip_whitelist_middleware(request: Request, call_next):
    # Skip IP check in production
    if settings.ENVIRONMENT.lower() == "production":
        return await call_next(request)

    allowed_ips = settings.allowed_ips

    # Skip if no IPs are configured
    if not allowed_ips:
        return await call_next(request)

    # Get client IP (with proxy support)
    client_ip = request.client.host if request.client else ""
    if x_forwarded_for := request.headers.get("X-Forwarded-For"):
        client_ip = x_forwarded_for.split(",")[0].strip()

    logger.debug(f"Checking {client_ip} against allowed IPs: {allowed_ips}")

    if client_ip in allowed_ips:
        return await call_next(request)

    logger.warning(f"Blocked {client_ip} (not in {allowed_ips})")
    return JSONResponse(
        status_code=403,
        content={
            "error": {
                "type": "Forbidden",
                "message": "Access forbidden",
                "detail": {"your_ip": client_ip},
                "path": request.url.path,
            }
        }
    )


# Initialize FastAPI app with lifespan context
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Initialize database connection and models (startup logic)
    client = await startDB()

    # Initialize rate limiter
    redis_connection = None
    if settings.RATE_LIMITING_ENABLED:
        redis_connection = redis.from_url(settings.REDIS_URL, encoding="utf-8")
        await FastAPILimiter.init(redis_connection)

    yield

    # Shutdown logic
    if redis_connection is not None:
        await FastAPILimiter.close()
    client.close()


app = FastAPI(
    title=settings.PLATFORM_NAME,
    lifespan=lifespan,
    docs_url=None if settings.ENVIRONMENT.lower() == "production" else "/docs",
    redoc_url=None if settings.ENVIRONMENT.lower() == "production" else "/redoc"
)


async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler that formats all errors consistently"""
    error_response = {
        "error": {
            "type": exc.__class__.__name__,
            "message": "An error occurred",
            "detail": str(exc),
            "path": request.url.path,
        }
    }

    status_code = 500

    # Domain errors raised by the services
    if isinstance(exc, StoreError):
        status_code = exc.status_code
        error_response["error"]["message"] = exc.message
        error_response["error"]["detail"] = exc.detail

    # Handle HTTP exceptions (404, 401, etc.)
    elif isinstance(exc, StarletteHTTPException):
        status_code = exc.status_code
        error_response["error"]["message"] = exc.detail
        error_response["error"]["detail"] = exc.detail

    # Handle validation errors
    elif isinstance(exc, RequestValidationError):
        status_code = 422
        error_response["error"]["message"] = "Validation error"
        error_response["error"]["detail"] = exc.errors()

    # Log unexpected errors
    if status_code == 500:
        logger.error(f"Unexpected error: {str(exc)}", exc_info=exc)
        error_response["error"]["message"] = "Internal server error"
        # Don't expose internal details
        error_response["error"]["detail"] = "Please contact support"

    headers = getattr(exc, "headers", None)
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(error_response),
        headers=headers
    )


# Register the handler for every error family the app can raise
app.add_exception_handler(StoreError, global_exception_handler)
app.add_exception_handler(StarletteHTTPException, global_exception_handler)
app.add_exception_handler(RequestValidationError, global_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

# Add the IP whitelist middleware first
app.middleware("http")(ip_whitelist_middleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(userRoute.router, prefix='/api/v1',
                   dependencies=[rate_limit(times=100, seconds=60)])
app.include_router(productRoute.router, tags=['products'], prefix='/api/v1',
                   dependencies=[rate_limit(times=100, seconds=60)])
app.include_router(cartRoute.router, tags=['cart'], prefix='/api/v1',
                   dependencies=[rate_limit(times=100, seconds=60)])
app.include_router(checkOutRoute.router, tags=['checkout'], prefix='/api/v1',
                   dependencies=[rate_limit(times=30, seconds=60)])


@app.get("/api/healthchecker", dependencies=[rate_limit(times=100, seconds=60)])
def root():
    return {"message": f"Welcome to {settings.PLATFORM_NAME}"}


if __name__ == "__main__":
    uvicorn.run("storefront.main:app", host="0.0.0.0", port=5001, reload=True, log_level="info")
