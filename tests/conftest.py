"""Global test configuration and fixtures for the Rent Estimator API."""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from asgi_lifespan import LifespanManager
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.core.context import CallerIdentity
from src.database.models import Base
from src.modules.rent.infrastructure.geocoding import GeocodingClient
from src.modules.rent.infrastructure.inference import InferenceGateway
from src.modules.rent.infrastructure.overpass import NearbyPlacesAggregator
from src.modules.rent.infrastructure.reports import ReportAssetsClient
from src.utils.settings.aws import AWSSettings
from src.utils.settings.overpass import OverpassSettings
from tests.factories import RentPredictionFactory
from tests.utils.fakes import (
    FakeInvoker,
    FakeOverpassFetcher,
    FakePlaceSearch,
    FakeS3Reader,
    FakeTokenVerifier,
    overpass_node,
)

USER_TOKEN = "user-1-token"
OTHER_USER_TOKEN = "user-2-token"

# Palermo, a few blocks from Plaza Italia
PALERMO_LAT = -34.5810
PALERMO_LNG = -58.4210

APP_STATE_COMPONENTS = (
    "db_engine",
    "session_factory",
    "inference_gateway",
    "geocoding_client",
    "nearby_places_aggregator",
    "report_assets_client",
    "token_verifier",
)


@pytest.fixture
def prediction_factory():
    return RentPredictionFactory


@pytest.fixture
def aws_settings() -> AWSSettings:
    return AWSSettings(
        AWS_REGION="us-east-1",
        BUCKET_NAME="observatorio-test",
        AWS_LOCATION_PLACE_INDEX="test-places",
        LAMBDA_PREDICTION_FUNCTION_NAME="rent-prediction-test",
        LAMBDA_TIMEOUT_SECONDS=2.0,
        GEOCODING_TIMEOUT_SECONDS=0.2,
    )


@pytest.fixture
def overpass_settings() -> OverpassSettings:
    return OverpassSettings(OVERPASS_TIMEOUT_SECONDS=0.2)


@pytest.fixture
def user_identity() -> CallerIdentity:
    return CallerIdentity(sub="user-1", email="user-1@example.com", username="user1")


@pytest.fixture
def other_identity() -> CallerIdentity:
    return CallerIdentity(sub="user-2", email="user-2@example.com", username="user2")


@pytest_asyncio.fixture
async def async_engine():
    """In-memory SQLite shared by every session of a test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=async_engine, class_=AsyncSession, expire_on_commit=False
    )


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# Collaborator fakes
@pytest.fixture
def fake_invoker() -> FakeInvoker:
    return FakeInvoker({"prediction": ["[850000.1]"]})


@pytest.fixture
def fake_place_search() -> FakePlaceSearch:
    # AWS Location answers [lng, lat]
    return FakePlaceSearch(point=[PALERMO_LNG, PALERMO_LAT])


@pytest.fixture
def fake_overpass() -> FakeOverpassFetcher:
    return FakeOverpassFetcher(
        elements={
            "restaurantes": [
                overpass_node(1, "La Cabrera", PALERMO_LAT + 0.001, PALERMO_LNG, amenity="restaurant"),
                overpass_node(2, "Café Registrado", PALERMO_LAT + 0.002, PALERMO_LNG, amenity="cafe"),
                overpass_node(3, "Don Julio", PALERMO_LAT + 0.003, PALERMO_LNG, amenity="restaurant", cuisine="steak_house"),
            ]
        }
    )


@pytest.fixture
def fake_s3() -> FakeS3Reader:
    return FakeS3Reader()


@pytest.fixture
def fake_token_verifier(user_identity, other_identity) -> FakeTokenVerifier:
    return FakeTokenVerifier(
        {USER_TOKEN: user_identity, OTHER_USER_TOKEN: other_identity}
    )


@pytest.fixture
def inference_gateway(fake_invoker, aws_settings) -> InferenceGateway:
    return InferenceGateway(fake_invoker, aws_settings)


@pytest.fixture
def geocoding_client(fake_place_search, aws_settings) -> GeocodingClient:
    return GeocodingClient(fake_place_search, aws_settings)


@pytest.fixture
def nearby_places_aggregator(fake_overpass, overpass_settings) -> NearbyPlacesAggregator:
    return NearbyPlacesAggregator(fake_overpass, overpass_settings)


@pytest.fixture
def report_assets_client(fake_s3, aws_settings) -> ReportAssetsClient:
    return ReportAssetsClient(fake_s3, aws_settings)


@pytest_asyncio.fixture
async def app(
    async_engine,
    session_factory,
    inference_gateway,
    geocoding_client,
    nearby_places_aggregator,
    report_assets_client,
    fake_token_verifier,
):
    """FastAPI application wired to SQLite and fake collaborators."""
    from src.main import app

    app.state.db_engine = async_engine
    app.state.session_factory = session_factory
    app.state.inference_gateway = inference_gateway
    app.state.geocoding_client = geocoding_client
    app.state.nearby_places_aggregator = nearby_places_aggregator
    app.state.report_assets_client = report_assets_client
    app.state.token_verifier = fake_token_verifier

    async with LifespanManager(app):
        yield app

    for name in APP_STATE_COMPONENTS:
        setattr(app.state, name, None)


# HTTP Client Fixtures
@pytest_asyncio.fixture
async def public_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Client without credentials."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test-rent-api",
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def authorized_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Client carrying user-1's access token."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test-rent-api",
        headers={"Authorization": f"Bearer {USER_TOKEN}"},
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def other_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Client carrying user-2's access token."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test-rent-api",
        headers={"Authorization": f"Bearer {OTHER_USER_TOKEN}"},
    ) as ac:
        yield ac
