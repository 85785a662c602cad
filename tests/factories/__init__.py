"""Test factories for the Rent Estimator API models."""

from .base import AsyncSQLAlchemyModelFactory
from .predictions import RentPredictionFactory

__all__ = [
    "AsyncSQLAlchemyModelFactory",
    "RentPredictionFactory",
]
