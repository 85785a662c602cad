import uvicorn
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.core.exceptions.base import register_exception_handlers
from src.api.core.middleware.auth import auth_middleware
from src.api.core.middleware.logging import logging_middleware
from src.api.core.middleware.security import (
    SecurityHeadersMiddleware,
    PayloadSizeMiddleware,
)
from src.api.router import api_router
from src.database.connection import AsyncSessionLocal, async_engine, create_tables
from src.modules.rent.infrastructure.geocoding import AwsPlaceSearch, GeocodingClient
from src.modules.rent.infrastructure.inference import InferenceGateway, LambdaInvoker
from src.modules.rent.infrastructure.overpass import (
    NearbyPlacesAggregator,
    OverpassClient,
)
from src.modules.rent.infrastructure.reports import AwsS3Reader, ReportAssetsClient
from src.modules.user.cognito import CognitoTokenVerifier
from src.utils.logger import setup_logging
from src.utils.settings.app import AppSettings
from src.utils.settings.auth import CognitoSettings
from src.utils.settings.aws import AWSSettings
from src.utils.settings.database import DatabaseSettings
from src.utils.settings.overpass import OverpassSettings


app_settings = AppSettings()
is_production = app_settings.is_production


def install_components(app: FastAPI) -> None:
    """Build the long-lived clients, keeping any already placed on app state."""
    aws_settings = AWSSettings()
    overpass_settings = OverpassSettings()

    defaults = {
        "session_factory": lambda: AsyncSessionLocal,
        "db_engine": lambda: async_engine,
        "inference_gateway": lambda: InferenceGateway(
            LambdaInvoker(aws_settings), aws_settings
        ),
        "geocoding_client": lambda: GeocodingClient(
            AwsPlaceSearch(aws_settings), aws_settings
        ),
        "nearby_places_aggregator": lambda: NearbyPlacesAggregator(
            OverpassClient(overpass_settings), overpass_settings
        ),
        "report_assets_client": lambda: ReportAssetsClient(
            AwsS3Reader(aws_settings), aws_settings
        ),
        "token_verifier": lambda: CognitoTokenVerifier(CognitoSettings()),
    }
    for name, build in defaults.items():
        if getattr(app.state, name, None) is None:
            setattr(app.state, name, build())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger = setup_logging(is_production, app_settings.effective_log_level)
    logger.info("Starting Rent Estimator API...")

    app_settings.validate_prod()

    missing = AWSSettings().missing_configuration()
    if missing:
        logger.warning("Missing AWS configuration", missing=missing)
    if not CognitoSettings().is_configured:
        logger.warning("Cognito is not configured, every caller is anonymous")

    install_components(app)
    logger.info("Clients and session factory added to app state")

    if DatabaseSettings().DATABASE_AUTO_CREATE:
        await create_tables(app.state.db_engine)
        logger.info("Database tables ensured")

    yield

    # Shutdown
    logger.info("Shutting down Rent Estimator API...")


app = FastAPI(
    title="Rent Estimator API",
    description="Monthly rent estimates for Buenos Aires properties",
    version=app_settings.API_VERSION,
    lifespan=lifespan,
    # Security: Disable docs in production
    docs_url=None if is_production else "/docs",
    redoc_url=None if is_production else "/redoc",
    openapi_url=None if is_production else "/openapi.json",
)

# Register global exception handlers
register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)

app.add_middleware(SecurityHeadersMiddleware, is_production=is_production)
app.add_middleware(PayloadSizeMiddleware, max_request_size=app_settings.MAX_REQUEST_SIZE)
app.middleware("http")(auth_middleware)
app.middleware("http")(logging_middleware)

app.include_router(api_router)


def run_dev_server():
    """Run development server with auto-reload."""
    uvicorn.run(
        "src.main:app", host="0.0.0.0", port=8010, reload=True, access_log=False
    )


def run_prod_server():
    """Run production server."""
    uvicorn.run(
        "src.main:app", host="0.0.0.0", port=8010, reload=False, access_log=False
    )
