from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Query, status

from src.api.core.constants import DEFAULT_RECENT_LIMIT, MAX_RECENT_LIMIT
from src.api.core.dependencies import CurrentIdentityDep, PredictionHistoryServiceDep
from src.api.core.exceptions.base import RentApiException
from src.api.core.messages import APIResponse, MessageCode
from src.api.predictions.schemas import (
    DeletePredictionResponse,
    NotesUpdateRequest,
    PredictionListResponse,
    PredictionRecordResponse,
    PredictionStatistics,
)
from src.database.models.predictions import PredictionStatus, RentPrediction
from src.modules.rent.application.history import PredictionFilters

router = APIRouter(prefix="/predictions", tags=["predictions"])


def _as_list(records: list[RentPrediction]) -> PredictionListResponse:
    return PredictionListResponse(
        count=len(records),
        predictions=[PredictionRecordResponse.from_record(r) for r in records],
    )


def _not_found(prediction_id: UUID) -> RentApiException:
    return RentApiException(
        MessageCode.PREDICTION_NOT_FOUND,
        status.HTTP_404_NOT_FOUND,
        {"prediction_id": str(prediction_id)},
    )


@router.get("")
async def list_predictions(
    identity: CurrentIdentityDep,
    history: PredictionHistoryServiceDep,
    status_filter: PredictionStatus | None = Query(default=None, alias="status"),
    barrio: str | None = Query(default=None),
    dormitorios: int | None = Query(default=None, ge=0),
    is_favorite: bool | None = Query(default=None, alias="isFavorite"),
    date_from: datetime | None = Query(default=None, alias="dateFrom"),
    date_to: datetime | None = Query(default=None, alias="dateTo"),
    min_precio: float | None = Query(default=None, alias="minPrecio"),
    max_precio: float | None = Query(default=None, alias="maxPrecio"),
) -> APIResponse[PredictionListResponse]:
    """The caller's predictions, newest first."""
    records = await history.get_predictions(
        PredictionFilters(
            cognito_sub=identity.sub,
            status=status_filter,
            barrio=barrio,
            dormitorios=dormitorios,
            is_favorite=is_favorite,
            date_from=date_from,
            date_to=date_to,
            min_precio=min_precio,
            max_precio=max_precio,
        )
    )
    return APIResponse.success(
        message_code=MessageCode.PREDICTIONS_RETRIEVED, data=_as_list(records)
    )


@router.get("/recent")
async def recent_predictions(
    identity: CurrentIdentityDep,
    history: PredictionHistoryServiceDep,
    limit: int = Query(default=DEFAULT_RECENT_LIMIT, ge=1, le=MAX_RECENT_LIMIT),
) -> APIResponse[PredictionListResponse]:
    records = await history.get_recent_predictions(identity.sub, limit)
    return APIResponse.success(
        message_code=MessageCode.PREDICTIONS_RETRIEVED, data=_as_list(records)
    )


@router.get("/statistics")
async def prediction_statistics(
    identity: CurrentIdentityDep,
    history: PredictionHistoryServiceDep,
) -> APIResponse[PredictionStatistics]:
    statistics = await history.get_user_statistics(identity.sub)
    return APIResponse.success(
        message_code=MessageCode.STATISTICS_RETRIEVED, data=statistics
    )


@router.get("/favorites")
async def favorite_predictions(
    identity: CurrentIdentityDep,
    history: PredictionHistoryServiceDep,
) -> APIResponse[PredictionListResponse]:
    records = await history.get_user_predictions(
        identity.sub, PredictionFilters(is_favorite=True)
    )
    return APIResponse.success(
        message_code=MessageCode.PREDICTIONS_RETRIEVED, data=_as_list(records)
    )


@router.get("/{prediction_id}")
async def get_prediction(
    prediction_id: UUID,
    identity: CurrentIdentityDep,
    history: PredictionHistoryServiceDep,
) -> APIResponse[PredictionRecordResponse]:
    record = await history.get_prediction_by_id(prediction_id)
    if record is None:
        raise _not_found(prediction_id)
    if record.cognito_sub != identity.sub:
        raise RentApiException(
            MessageCode.PREDICTION_FORBIDDEN,
            status.HTTP_403_FORBIDDEN,
            {"prediction_id": str(prediction_id)},
        )

    return APIResponse.success(
        message_code=MessageCode.PREDICTION_RETRIEVED,
        data=PredictionRecordResponse.from_record(record),
    )


@router.post("/{prediction_id}/favorite")
async def toggle_favorite(
    prediction_id: UUID,
    identity: CurrentIdentityDep,
    history: PredictionHistoryServiceDep,
) -> APIResponse[PredictionRecordResponse]:
    record = await history.toggle_favorite(prediction_id, identity.sub)
    if record is None:
        raise _not_found(prediction_id)

    return APIResponse.success(
        message_code=(
            MessageCode.FAVORITE_ADDED
            if record.is_favorite
            else MessageCode.FAVORITE_REMOVED
        ),
        data=PredictionRecordResponse.from_record(record),
    )


@router.put("/{prediction_id}/notes")
async def update_notes(
    prediction_id: UUID,
    body: NotesUpdateRequest,
    identity: CurrentIdentityDep,
    history: PredictionHistoryServiceDep,
) -> APIResponse[PredictionRecordResponse]:
    if body.notes is None:
        raise RentApiException(
            MessageCode.BAD_REQUEST,
            status.HTTP_400_BAD_REQUEST,
            {"description": "notes is required"},
        )

    record = await history.add_notes(prediction_id, identity.sub, body.notes)
    if record is None:
        raise _not_found(prediction_id)

    return APIResponse.success(
        message_code=MessageCode.NOTES_UPDATED,
        data=PredictionRecordResponse.from_record(record),
    )


@router.delete("/{prediction_id}")
async def delete_prediction(
    prediction_id: UUID,
    identity: CurrentIdentityDep,
    history: PredictionHistoryServiceDep,
) -> APIResponse[DeletePredictionResponse]:
    deleted = await history.delete_prediction(prediction_id, identity.sub)
    if not deleted:
        raise _not_found(prediction_id)

    return APIResponse.success(
        message_code=MessageCode.PREDICTION_DELETED,
        data=DeletePredictionResponse(id=prediction_id),
    )
