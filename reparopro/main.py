from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from pydantic import ValidationError
import logging
from .api.v1.endpoints.quote import router as quote_router
from .api.v1.endpoints.estimate import router as estimate_router
from .api.v1.endpoints.work_order import router as work_order_router
from .api.v1.endpoints.portal import router as portal_router
from .api.v1.endpoints.dashboard import router as dashboard_router
from .config import settings
from .db_init import init_db
from .exceptions.errors import QuoteError
from .exceptions.handlers import quote_error_handler, validation_exception_handler
from .utils.sentry import init_sentry

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Orçamentos de funilaria e pintura, ordens de serviço e portal do cliente",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add exception handlers
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(ValidationError, validation_exception_handler)
app.add_exception_handler(QuoteError, quote_error_handler)

# Include routers
app.include_router(quote_router, prefix=f"{settings.API_PREFIX}/quotes", tags=["quotes"])
app.include_router(
    estimate_router,
    prefix=f"{settings.API_PREFIX}/quotes/{{quote_id}}/damaged-parts",
    tags=["estimate"],
)
app.include_router(work_order_router, prefix=f"{settings.API_PREFIX}/work-orders", tags=["work-orders"])
app.include_router(portal_router, prefix=f"{settings.API_PREFIX}/portal", tags=["portal"])
app.include_router(dashboard_router, prefix=f"{settings.API_PREFIX}/dashboard", tags=["dashboard"])


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail}
    )


@app.on_event("startup")
async def startup_event():
    logger.info("Application starting up")
    try:
        init_db()
    except Exception as e:
        logger.error(f"Error during startup: {str(e)}")

    if settings.SENTRY_DSN:
        try:
            logger.info(f"Initializing Sentry for environment {settings.SENTRY_ENVIRONMENT}")
            init_sentry(
                dsn=settings.SENTRY_DSN,
                environment=settings.SENTRY_ENVIRONMENT,
                traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE
            )
        except Exception as e:
            logger.error(f"Error initializing Sentry: {str(e)}")
    else:
        logger.warning("SENTRY_DSN is not configured, skipping Sentry initialization")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutting down")
