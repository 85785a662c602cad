"""Database models for the Rent Estimator API."""

from .base import Base
from .predictions import PredictionStatus, RentPrediction

__all__ = [
    "Base",
    "PredictionStatus",
    "RentPrediction",
]
