"""Rent prediction records, one per authenticated predict request."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import UUID

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

# JSONB on Postgres, plain JSON elsewhere (tests run on SQLite).
JSONBlob = JSON().with_variant(JSONB(), "postgresql")


class PredictionStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


class RentPrediction(Base):
    __tablename__ = "rent_predictions"
    __table_args__ = (Index("ix_rent_predictions_sub_created", "cognito_sub", "created_at"),)

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    cognito_sub: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    user_email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Request snapshot
    barrio: Mapped[str | None] = mapped_column(String(255), nullable=True)
    ambientes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    metros_cuadrados_min: Mapped[float | None] = mapped_column(
        Numeric(10, 2, asdecimal=False), nullable=True
    )
    metros_cuadrados_max: Mapped[float | None] = mapped_column(
        Numeric(10, 2, asdecimal=False), nullable=True
    )
    dormitorios: Mapped[int | None] = mapped_column(Integer, nullable=True)
    banos: Mapped[int | None] = mapped_column(Integer, nullable=True)
    garajes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    antiguedad: Mapped[int | None] = mapped_column(Integer, nullable=True)
    calle: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Results
    precio_cota_inferior: Mapped[float | None] = mapped_column(
        Numeric(12, 2, asdecimal=False), nullable=True
    )
    precio_cota_superior: Mapped[float | None] = mapped_column(
        Numeric(12, 2, asdecimal=False), nullable=True
    )
    moneda: Mapped[str] = mapped_column(String(10), default="ARS")

    images: Mapped[dict[str, Any] | None] = mapped_column(JSONBlob, nullable=True)
    metrics: Mapped[dict[str, Any] | None] = mapped_column(JSONBlob, nullable=True)
    nearby_places: Mapped[dict[str, Any] | None] = mapped_column(JSONBlob, nullable=True)

    status: Mapped[PredictionStatus] = mapped_column(
        String(20), default=PredictionStatus.PENDING, index=True
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    execution_time_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)

    user_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_favorite: Mapped[bool] = mapped_column(Boolean, default=False, index=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    @property
    def price_midpoint(self) -> float | None:
        if self.precio_cota_inferior is None or self.precio_cota_superior is None:
            return None
        return (self.precio_cota_inferior + self.precio_cota_superior) / 2
