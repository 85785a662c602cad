from typing import Annotated, AsyncGenerator

from fastapi import Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.core.exceptions.base import RentApiException
from src.api.core.messages import MessageCode
from src.core.context import CallerIdentity
from src.modules.rent.application.history import PredictionHistoryService
from src.modules.rent.application.orchestrator import PredictionOrchestrator


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Get database session from app state."""
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        yield session


async def get_prediction_history_service(
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> PredictionHistoryService:
    """Get prediction history service with database session."""
    return PredictionHistoryService(db)


async def get_prediction_orchestrator(
    request: Request,
    history: Annotated[
        PredictionHistoryService, Depends(get_prediction_history_service)
    ],
) -> PredictionOrchestrator:
    """Wire the long-lived clients from app state with a per-request history service."""
    state = request.app.state
    return PredictionOrchestrator(
        inference=state.inference_gateway,
        geocoding=state.geocoding_client,
        nearby_places=state.nearby_places_aggregator,
        report_assets=state.report_assets_client,
        history=history,
    )


async def get_optional_identity(request: Request) -> CallerIdentity | None:
    """Identity set by the auth middleware, or None for anonymous callers."""
    return getattr(request.state, "identity", None)


async def get_current_identity(request: Request) -> CallerIdentity:
    identity = getattr(request.state, "identity", None)
    if identity is None:
        raise RentApiException(
            MessageCode.AUTH_REQUIRED,
            status.HTTP_401_UNAUTHORIZED,
            {"description": "A valid Cognito access token is required"},
        )
    return identity


AsyncSessionDep = Annotated[AsyncSession, Depends(get_db_session)]
PredictionHistoryServiceDep = Annotated[
    PredictionHistoryService, Depends(get_prediction_history_service)
]
PredictionOrchestratorDep = Annotated[
    PredictionOrchestrator, Depends(get_prediction_orchestrator)
]

OptionalIdentityDep = Annotated[CallerIdentity | None, Depends(get_optional_identity)]
CurrentIdentityDep = Annotated[CallerIdentity, Depends(get_current_identity)]
