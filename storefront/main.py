import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from storefront.api.v1.router import router as v1_router
from storefront.core.config import settings
from storefront.core.deps import get_storage, shutdown_analytics
from storefront.core.exceptions import ProductNotFound, UnknownControl
from storefront.core.limiter import init_limiter_error_handlers, limiter
from storefront.core.logging import request_id_var, setup_logging
from storefront.storage.base import StorageInterface

# LOGGING
setup_logging()
logger = logging.getLogger(__name__)

# APP INITIALIZATION
allowed_hosts = settings.allowed_hosts.split(",")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.app_name} ({settings.cart_storage} cart storage)")
    yield
    shutdown_analytics()
    logger.info("Analytics channels closed")


app = FastAPI(
    title=settings.app_name,
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(ProductNotFound)
async def product_not_found_handler(request: Request, exc: ProductNotFound):
    return JSONResponse(
        status_code=404,
        content={"detail": str(exc)},
    )


@app.exception_handler(UnknownControl)
async def unknown_control_handler(request: Request, exc: UnknownControl):
    logger.warning(f"Rejected control: {str(exc)}")
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc)},
    )


@app.exception_handler(ValidationError)
async def dataset_validation_handler(request: Request, exc: ValidationError):
    # Raised when control data attributes do not form a valid product
    return JSONResponse(
        status_code=422,
        content={"detail": exc.errors(include_url=False, include_context=False)},
    )


# ROUTERS
app.include_router(v1_router, prefix="/api/v1")


@app.exception_handler(Exception)
async def universal_exception_handler(request: Request, exc: Exception):
    # Log the real error for the developer
    logger.error(f"Unhandled error: {str(exc)}", exc_info=True)

    # Send a polite message to the user
    return JSONResponse(
        status_code=500, content={"detail": "An unexpected error occurred."}
    )


# RATE LIMITING
app.state.limiter = limiter
init_limiter_error_handlers(app)


# SECURITY MIDDLEWARES
app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=allowed_hosts,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:8000",
        "http://localhost:3000",
    ],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["Content-Type"],
)


# REQUEST TRACING & SECURITY HEADERS
@app.middleware("http")
async def security_and_tracing_middleware(request: Request, call_next):
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    token = request_id_var.set(request_id)

    try:
        response = await call_next(request)

        response.headers["X-Request-Id"] = request_id
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"

        if settings.environment == "production":
            response.headers["Strict-Transport-Security"] = (
                "max-age=63072000; includeSubDomains"
            )

        return response

    except Exception as e:
        # Ensure we still reset the context var even if the app crashes
        logger.error(f"Middleware caught crash: {e}", exc_info=True)
        return JSONResponse(
            status_code=500, content={"detail": "Internal Server Error"}
        )

    finally:
        request_id_var.reset(token)


# HEALTH CHECKS
@app.get("/health")
def health_check(storage: StorageInterface = Depends(get_storage)):
    health_status = {"status": "healthy", "dependencies": {}}

    if storage.ping():
        health_status["dependencies"]["cart_storage"] = "ok"
    else:
        health_status["status"] = "unhealthy"
        health_status["dependencies"]["cart_storage"] = "unreachable"

    return health_status


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
