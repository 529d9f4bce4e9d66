from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from contextlib import asynccontextmanager
from sqlalchemy import text
from app.config import settings
from app.database.connection import close_db, engine, init_db
from app.controllers.auth_controller import router as auth_router
from app.controllers.listing_controller import router as listing_router
from app.utils.exceptions import register_exception_handlers
from app import models  # noqa: F401  (registers tables on Base.metadata)
import logging
import time

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log all incoming requests"""
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        client_ip = request.client.host if request.client else "unknown"

        auth_header = request.headers.get("authorization")
        if auth_header:
            # Never write a full bearer token to the logs
            auth_header = auth_header[:20] + "..." if len(auth_header) > 20 else auth_header
        logger.info(
            f"Request: {request.method} {request.url.path} from {client_ip}"
            + (f" (auth: {auth_header})" if auth_header else "")
        )

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(f"Response: {response.status_code} for {request.method} {request.url.path} ({process_time:.3f}s)")

        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Test database connection on startup (non-blocking - don't fail startup)
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection successful")
        if settings.ENVIRONMENT == "development":
            await init_db()
    except Exception as e:
        logger.warning(f"Database connection failed on startup: {str(e)}")
        logger.warning("App will continue, but database-dependent features may not work")

    yield

    # Cleanup on shutdown
    try:
        await close_db()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error(f"Error closing database: {str(e)}")


app = FastAPI(
    title="Listings Marketplace API",
    description="Property listings with buyer/seller accounts",
    version="1.0.0",
    lifespan=lifespan
)

# Add request logging middleware first (runs before CORS)
app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth_router)
app.include_router(listing_router)


@app.get("/")
async def root():
    return {"message": "Listings Marketplace API", "status": "running"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
