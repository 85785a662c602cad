"""End-to-end rent prediction: inference, enrichment and record keeping."""

import asyncio
import time
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from src.api.core.constants import DEFAULT_CURRENCY
from src.api.rent.schemas import (
    Coordinates,
    InferenceResult,
    NearbyPlacesResult,
    PredictionRequest,
    ReportAssets,
)
from src.core.context import CallerIdentity
from src.database.models.predictions import PredictionStatus
from src.modules.rent.application.history import PredictionHistoryService
from src.modules.rent.errors import InferenceError, PredictionFailedError
from src.modules.rent.infrastructure.geocoding import GeocodingClient
from src.modules.rent.infrastructure.inference import InferenceGateway
from src.modules.rent.infrastructure.overpass import NearbyPlacesAggregator
from src.modules.rent.infrastructure.reports import ReportAssetsClient
from src.utils.logger import get_logger


def elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


class PredictionOrchestrator:
    """Runs one predict request.

    Inference, geocoding and report lookup run concurrently. Nearby places
    are searched only once coordinates are known. Only inference failures
    fail the request; every other branch degrades to null or empty data.
    Authenticated callers get a ``rent_predictions`` record that starts
    ``pending`` and ends ``success`` or ``error``.
    """

    def __init__(
        self,
        inference: InferenceGateway,
        geocoding: GeocodingClient,
        nearby_places: NearbyPlacesAggregator,
        report_assets: ReportAssetsClient,
        history: PredictionHistoryService | None = None,
        logger=None,
    ):
        self.inference = inference
        self.geocoding = geocoding
        self.nearby_places = nearby_places
        self.report_assets = report_assets
        self.history = history
        self.logger = logger or get_logger(self.__class__.__name__)

    async def orchestrate(
        self, request: PredictionRequest, identity: CallerIdentity | None = None
    ) -> dict[str, Any]:
        start = time.perf_counter()
        record_id: UUID | None = None

        try:
            if identity is not None and self.history is not None:
                record_id = await self._create_record(request, identity)

            inference, coordinates, assets = await asyncio.gather(
                self.inference.predict(request),
                self._geocode(request),
                self._report_assets(request),
            )

            nearby = None
            if coordinates is not None:
                nearby = await self.nearby_places.nearby(coordinates.lat, coordinates.lng)

            execution_time_ms = elapsed_ms(start)
            response = self._merge(inference, assets, nearby, record_id, execution_time_ms)
        except Exception as e:
            execution_time_ms = elapsed_ms(start)
            message = e.message if isinstance(e, InferenceError) else str(e)
            self.logger.error(
                "Prediction failed",
                error=message,
                error_type=type(e).__name__,
                prediction_id=str(record_id) if record_id else None,
                execution_time_ms=execution_time_ms,
            )
            if record_id is not None:
                await self._mark_failed(record_id, message, execution_time_ms)
            raise PredictionFailedError(message, execution_time_ms) from e

        if record_id is not None:
            await self._mark_succeeded(record_id, inference, assets, nearby, execution_time_ms)

        self.logger.info(
            "Prediction completed",
            prediction_id=str(record_id) if record_id else None,
            has_coordinates=coordinates is not None,
            execution_time_ms=execution_time_ms,
        )
        return response

    async def _create_record(
        self, request: PredictionRequest, identity: CallerIdentity
    ) -> UUID | None:
        try:
            record = await self.history.create_prediction(
                request, cognito_sub=identity.sub, user_email=identity.email
            )
        except Exception as e:
            self.logger.error(
                "Could not create prediction record, continuing without it",
                error=str(e),
                sub=identity.sub,
            )
            return None
        return record.id

    async def _geocode(self, request: PredictionRequest) -> Coordinates | None:
        try:
            return await self.geocoding.geocode(request.street, request.neighborhood)
        except Exception as e:
            self.logger.warning("Geocoding failed", error=str(e))
            return None

    async def _report_assets(self, request: PredictionRequest) -> ReportAssets:
        try:
            return await self.report_assets.get_report_assets(request.neighborhood)
        except Exception as e:
            self.logger.warning("Report assets lookup failed", error=str(e))
            return ReportAssets()

    @staticmethod
    def _merge(
        inference: InferenceResult,
        assets: ReportAssets,
        nearby: NearbyPlacesResult | None,
        record_id: UUID | None,
        execution_time_ms: int,
    ) -> dict[str, Any]:
        return {
            **inference.prediction_fields(),
            "images": assets.images.model_dump(),
            "metrics": assets.metrics,
            "input_data": inference.input_data,
            "nearby_places": nearby.model_dump() if nearby is not None else None,
            "prediction_id": str(record_id) if record_id is not None else None,
            "executionTimeMs": execution_time_ms,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    async def _mark_succeeded(
        self,
        record_id: UUID,
        inference: InferenceResult,
        assets: ReportAssets,
        nearby: NearbyPlacesResult | None,
        execution_time_ms: int,
    ) -> None:
        # The caller already has a valid prediction; a failed write is only logged.
        try:
            await self.history.update_prediction(
                record_id,
                precio_cota_inferior=inference.price_floor,
                precio_cota_superior=inference.price_ceiling,
                moneda=DEFAULT_CURRENCY,
                images=assets.images.model_dump(),
                metrics=assets.metrics,
                nearby_places=nearby.model_dump() if nearby is not None else None,
                status=PredictionStatus.SUCCESS,
                execution_time_ms=execution_time_ms,
            )
        except Exception as e:
            self.logger.error(
                "Could not store prediction result",
                prediction_id=str(record_id),
                error=str(e),
            )

    async def _mark_failed(
        self, record_id: UUID, message: str, execution_time_ms: int
    ) -> None:
        try:
            await self.history.update_prediction(
                record_id,
                status=PredictionStatus.ERROR,
                error_message=message,
                execution_time_ms=execution_time_ms,
            )
        except Exception as e:
            self.logger.error(
                "Could not mark prediction as failed",
                prediction_id=str(record_id),
                error=str(e),
            )
