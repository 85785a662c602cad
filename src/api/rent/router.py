from typing import Any

from fastapi import APIRouter

from src.api.core.dependencies import OptionalIdentityDep, PredictionOrchestratorDep
from src.api.rent.schemas import PredictionRequest

router = APIRouter(prefix="/rent", tags=["rent"])


@router.post("/predict")
async def predict_rent(
    body: PredictionRequest,
    orchestrator: PredictionOrchestratorDep,
    identity: OptionalIdentityDep,
) -> dict[str, Any]:
    """Estimate the monthly rent for a property.

    Accepts Spanish or English field names. Authenticated callers get the
    result stored in their history; the returned ``prediction_id`` is null
    for anonymous calls. Failures answer 500 with
    ``{error, message, executionTimeMs}``.
    """
    return await orchestrator.orchestrate(body, identity)
