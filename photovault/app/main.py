from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from contextlib import asynccontextmanager
import logging

from photovault import __version__
from photovault.app.config import settings
from photovault.app.exceptions import register_exception_handlers
from photovault.app.logging_config import setup_logging
from photovault.app.middleware import register_middleware
from photovault.api.deps import get_storage
from photovault.api.v1.router import api_router
from photovault.schemas.common import ApiResponse
from photovault.services.storage.s3 import S3Service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME} ({settings.ENVIRONMENT})...")
    yield
    logger.info("Shutting down...")


def create_application() -> FastAPI:
    setup_logging()

    application = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        version=__version__,
        lifespan=lifespan,
    )

    # Middleware
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(GZipMiddleware, minimum_size=1000)
    register_middleware(application)

    register_exception_handlers(application)

    # Routers
    application.include_router(api_router, prefix=settings.API_PREFIX)

    @application.get("/health", tags=["health"])
    def health_check():
        return {"status": "healthy", "environment": settings.ENVIRONMENT}

    @application.get("/health/storage", response_model=ApiResponse[dict], tags=["health"])
    def storage_health(storage: S3Service = Depends(get_storage)):
        return ApiResponse(data=storage.check_bucket_access())

    return application


app = create_application()
