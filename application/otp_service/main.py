from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from otp_service.config.settings import OTPServiceConfigs
from otp_service.logging.utils import initialize_logging, get_app_logger

configs = OTPServiceConfigs()

# Sentry first so that import-time errors below are reported
from otp_service.config.sentry import init_sentry
init_sentry()

initialize_logging()
logger = get_app_logger('otp_service.main')

logger.info(f"Running in {'debug' if configs.DEBUG else 'production'} mode")

from otp_service.connections.database import close_db_pool
from otp_service.middlewares.handlers import register_exception_handlers
from otp_service.middlewares.logging_middleware import AuditMiddleware
from otp_service.routes.health import router as health_router
from otp_service.routes.otp import router as otp_router
from otp_service.services.otp_service import shutdown_otp_service


@asynccontextmanager
async def lifespan(_: FastAPI):
    logger.info("Starting OTP service")
    yield
    logger.info("Shutting down OTP service")
    await shutdown_otp_service()
    await close_db_pool()


app = FastAPI(
    title="OTP Service",
    version=configs.APP_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if configs.DEBUG else None,
    redoc_url="/redoc" if configs.DEBUG else None
)

if configs.ALLOWED_ORIGINS:
    origins = [origin.strip() for origin in configs.ALLOWED_ORIGINS.split(",")]
else:
    origins = ["*"]

app.add_middleware(AuditMiddleware)

logger.info(f"Configuring CORS with allowed origins: {origins}")
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(otp_router, prefix="/v1")
app.include_router(health_router, tags=["health"])
