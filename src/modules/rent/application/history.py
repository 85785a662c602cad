"""Prediction record persistence and history queries."""

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import delete, select

from src.api.predictions.schemas import PredictionStatistics
from src.api.rent.schemas import PredictionRequest
from src.core.base import BaseService
from src.database.models.predictions import PredictionStatus, RentPrediction

UPDATABLE_FIELDS = {
    "precio_cota_inferior",
    "precio_cota_superior",
    "moneda",
    "images",
    "metrics",
    "nearby_places",
    "status",
    "error_message",
    "execution_time_ms",
    "user_notes",
    "is_favorite",
}


@dataclass
class PredictionFilters:
    cognito_sub: str | None = None
    status: PredictionStatus | None = None
    barrio: str | None = None
    dormitorios: int | None = None
    is_favorite: bool | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    min_precio: float | None = None
    max_precio: float | None = None


class PredictionHistoryService(BaseService):
    """CRUD over ``rent_predictions``, always scoped to the owner where it matters."""

    async def create_prediction(
        self,
        request: PredictionRequest,
        cognito_sub: str,
        user_email: str | None = None,
    ) -> RentPrediction:
        input_data = request.to_input_data()
        prediction = RentPrediction(
            cognito_sub=cognito_sub,
            user_email=user_email,
            barrio=input_data["barrio"],
            ambientes=input_data["ambientes"],
            metros_cuadrados_min=input_data["metrosCuadradosMin"],
            metros_cuadrados_max=input_data["metrosCuadradosMax"],
            dormitorios=input_data["dormitorios"],
            banos=input_data["banos"],
            garajes=input_data["garajes"],
            antiguedad=input_data["antiguedad"],
            calle=input_data["calle"],
            status=PredictionStatus.PENDING,
        )
        self.db.add(prediction)
        await self.db.commit()
        await self.db.refresh(prediction)

        self.logger.info(
            "Prediction record created", prediction_id=str(prediction.id), sub=cognito_sub
        )
        return prediction

    async def update_prediction(
        self, prediction_id: UUID, **changes: Any
    ) -> RentPrediction | None:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")

        prediction = await self.get_prediction_by_id(prediction_id)
        if prediction is None:
            return None

        for field, value in changes.items():
            setattr(prediction, field, value)
        await self.db.commit()
        await self.db.refresh(prediction)
        return prediction

    async def get_prediction_by_id(self, prediction_id: UUID) -> RentPrediction | None:
        result = await self.db.execute(
            select(RentPrediction).where(RentPrediction.id == prediction_id)
        )
        return result.scalar_one_or_none()

    async def get_user_predictions(
        self, cognito_sub: str, filters: PredictionFilters | None = None
    ) -> list[RentPrediction]:
        values = asdict(filters) if filters else {}
        values["cognito_sub"] = cognito_sub
        return await self.get_predictions(PredictionFilters(**values))

    async def get_predictions(self, filters: PredictionFilters) -> list[RentPrediction]:
        stmt = select(RentPrediction)

        if filters.cognito_sub is not None:
            stmt = stmt.where(RentPrediction.cognito_sub == filters.cognito_sub)
        if filters.status is not None:
            stmt = stmt.where(RentPrediction.status == filters.status)
        if filters.barrio:
            stmt = stmt.where(RentPrediction.barrio == filters.barrio)
        if filters.dormitorios is not None:
            stmt = stmt.where(RentPrediction.dormitorios == filters.dormitorios)
        if filters.is_favorite is not None:
            stmt = stmt.where(RentPrediction.is_favorite == filters.is_favorite)
        if filters.date_from is not None:
            stmt = stmt.where(RentPrediction.created_at >= filters.date_from)
        if filters.date_to is not None:
            stmt = stmt.where(RentPrediction.created_at <= filters.date_to)
        if filters.min_precio is not None:
            stmt = stmt.where(RentPrediction.precio_cota_inferior >= filters.min_precio)
        if filters.max_precio is not None:
            stmt = stmt.where(RentPrediction.precio_cota_superior <= filters.max_precio)

        result = await self.db.execute(stmt.order_by(RentPrediction.created_at.desc()))
        return list(result.scalars().all())

    async def _get_owned(self, prediction_id: UUID, cognito_sub: str) -> RentPrediction | None:
        result = await self.db.execute(
            select(RentPrediction).where(
                RentPrediction.id == prediction_id,
                RentPrediction.cognito_sub == cognito_sub,
            )
        )
        return result.scalar_one_or_none()

    async def toggle_favorite(
        self, prediction_id: UUID, cognito_sub: str
    ) -> RentPrediction | None:
        prediction = await self._get_owned(prediction_id, cognito_sub)
        if prediction is None:
            return None

        prediction.is_favorite = not prediction.is_favorite
        await self.db.commit()
        await self.db.refresh(prediction)
        return prediction

    async def add_notes(
        self, prediction_id: UUID, cognito_sub: str, notes: str
    ) -> RentPrediction | None:
        prediction = await self._get_owned(prediction_id, cognito_sub)
        if prediction is None:
            return None

        prediction.user_notes = notes
        await self.db.commit()
        await self.db.refresh(prediction)
        return prediction

    async def delete_prediction(self, prediction_id: UUID, cognito_sub: str) -> bool:
        result = await self.db.execute(
            delete(RentPrediction).where(
                RentPrediction.id == prediction_id,
                RentPrediction.cognito_sub == cognito_sub,
            )
        )
        await self.db.commit()
        deleted = (result.rowcount or 0) > 0
        if deleted:
            self.logger.info("Prediction deleted", prediction_id=str(prediction_id))
        return deleted

    async def get_user_statistics(self, cognito_sub: str) -> PredictionStatistics:
        predictions = await self.get_user_predictions(cognito_sub)

        # Records with a zero or missing bound do not count towards the average.
        midpoints = [
            p.price_midpoint
            for p in predictions
            if p.precio_cota_inferior and p.precio_cota_superior
        ]
        average = sum(midpoints) / len(midpoints) if midpoints else 0.0

        return PredictionStatistics(
            total=len(predictions),
            successful=sum(1 for p in predictions if p.status == PredictionStatus.SUCCESS),
            failed=sum(1 for p in predictions if p.status == PredictionStatus.ERROR),
            favorites=sum(1 for p in predictions if p.is_favorite),
            average_price=round(average, 2),
        )

    async def get_recent_predictions(
        self, cognito_sub: str, limit: int = 10
    ) -> list[RentPrediction]:
        result = await self.db.execute(
            select(RentPrediction)
            .where(RentPrediction.cognito_sub == cognito_sub)
            .order_by(RentPrediction.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
