from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

from commsgate.config.settings import GatewayConfigs, validate_provider_settings
from commsgate.logging.utils import initialize_logging, get_app_logger
from commsgate.middlewares.logging_middleware import AuditMiddleware

# Sentry must be initialised before the routers are imported
from commsgate.config.sentry import init_sentry
init_sentry()

initialize_logging()
logger = get_app_logger('commsgate.main')
configs = GatewayConfigs()

logger.info(f"Running in {'debug' if configs.DEBUG else 'production'} mode")


@asynccontextmanager
async def lifespan(_: FastAPI):
    try:
        validate_provider_settings(configs)
    except Exception as e:
        logger.critical(f"Startup aborted: {str(e)}")
        raise
    logger.info("Starting commsgate")
    yield
    logger.info("Shutting down commsgate")


docs_url = "/docs" if configs.DEBUG else None
redoc_url = "/redoc" if configs.DEBUG else None

app = FastAPI(
    title="commsgate",
    version=configs.APP_VERSION,
    lifespan=lifespan,
    docs_url=docs_url,
    redoc_url=redoc_url,
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

from commsgate.middlewares.handlers import register_exception_handlers
register_exception_handlers(app)

from commsgate.routes import api_router
from commsgate.routes.health import router as health_router

app.include_router(api_router, prefix="/api")
app.include_router(health_router, tags=["health"])
