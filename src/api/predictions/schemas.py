from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.database.models.predictions import PredictionStatus, RentPrediction


class PredictionInputData(BaseModel):
    barrio: str | None = None
    ambientes: int | None = None
    metrosCuadradosMin: float | None = None
    metrosCuadradosMax: float | None = None
    dormitorios: int | None = None
    banos: int | None = None
    garajes: int | None = None
    antiguedad: int | None = None
    calle: str | None = None


class PredictionRecordResponse(BaseModel):
    """Stored prediction as the frontend history views expect it."""

    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    cognito_sub: str | None = Field(default=None, serialization_alias="cognitoSub")
    user_email: str | None = Field(default=None, serialization_alias="userEmail")
    input_data: PredictionInputData
    prediction_min: float | None = Field(default=None, serialization_alias="predictionMin")
    prediction_max: float | None = Field(default=None, serialization_alias="predictionMax")
    moneda: str
    images: dict[str, Any] | None = None
    metrics: dict[str, Any] | None = None
    nearby_places: dict[str, Any] | None = None
    status: PredictionStatus
    execution_time_ms: int | None = Field(default=None, serialization_alias="executionTimeMs")
    error_message: str | None = Field(default=None, serialization_alias="errorMessage")
    user_notes: str | None = Field(default=None, serialization_alias="userNotes")
    is_favorite: bool = Field(default=False, serialization_alias="isFavorite")
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")

    @classmethod
    def from_record(cls, record: RentPrediction) -> "PredictionRecordResponse":
        return cls(
            id=record.id,
            cognito_sub=record.cognito_sub,
            user_email=record.user_email,
            input_data=PredictionInputData(
                barrio=record.barrio,
                ambientes=record.ambientes,
                metrosCuadradosMin=record.metros_cuadrados_min,
                metrosCuadradosMax=record.metros_cuadrados_max,
                dormitorios=record.dormitorios,
                banos=record.banos,
                garajes=record.garajes,
                antiguedad=record.antiguedad,
                calle=record.calle,
            ),
            prediction_min=record.precio_cota_inferior,
            prediction_max=record.precio_cota_superior,
            moneda=record.moneda,
            images=record.images,
            metrics=record.metrics,
            nearby_places=record.nearby_places,
            status=record.status,
            execution_time_ms=record.execution_time_ms,
            error_message=record.error_message,
            user_notes=record.user_notes,
            is_favorite=record.is_favorite,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class PredictionListResponse(BaseModel):
    count: int
    predictions: list[PredictionRecordResponse]


class PredictionStatistics(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int = 0
    successful: int = 0
    failed: int = 0
    favorites: int = 0
    average_price: float = Field(default=0.0, serialization_alias="averagePrice")


class NotesUpdateRequest(BaseModel):
    notes: str | None = None


class DeletePredictionResponse(BaseModel):
    id: UUID
    deleted: bool = True
