import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.utils.logger import get_logger
from src.utils.settings.aws import AWSSettings

logger = get_logger(__name__)


@dataclass
class HealthCheckResult:
    """Result of a health check."""

    service: str
    status: Literal["healthy", "unhealthy", "degraded"]
    connected: bool
    details: dict
    error: str | None = None


@dataclass
class OverallHealthStatus:
    """Overall health status with individual service results."""

    status: Literal["healthy", "degraded", "unhealthy"]
    services: dict[str, HealthCheckResult]
    timestamp: str


class HealthService:
    """Service for performing health checks on various system components."""

    def __init__(self, db: AsyncSession, aws_settings: AWSSettings | None = None):
        self.db = db
        self.aws_settings = aws_settings or AWSSettings()

    async def check_database_health(self) -> HealthCheckResult:
        """Database connection health check."""
        try:
            result = await self.db.execute(text("SELECT 1 as test"))
            test_value = result.scalar()

            return HealthCheckResult(
                service="database",
                status="healthy",
                connected=True,
                details={"test_query_result": test_value},
            )
        except Exception as e:
            logger.error(f"Database health check error: {e}")
            return HealthCheckResult(
                service="database",
                status="unhealthy",
                connected=False,
                details={},
                error=str(e),
            )

    async def check_aws_configuration(self) -> HealthCheckResult:
        """Settings needed to reach Lambda and S3; no network calls."""
        missing = self.aws_settings.missing_configuration()
        return HealthCheckResult(
            service="aws",
            status="degraded" if missing else "healthy",
            connected=not missing,
            details={
                "missing_settings": missing,
                "lambda_function": self.aws_settings.LAMBDA_PREDICTION_FUNCTION_NAME,
                "region": self.aws_settings.AWS_REGION,
            },
        )

    async def run_all_checks(self) -> OverallHealthStatus:
        """Run all health checks in parallel and return overall status."""
        results = await asyncio.gather(
            self.check_database_health(),
            self.check_aws_configuration(),
        )

        services = {result.service: result for result in results}
        if any(result.status == "unhealthy" for result in results):
            overall_status = "unhealthy"
        elif any(result.status == "degraded" for result in results):
            overall_status = "degraded"
        else:
            overall_status = "healthy"

        return OverallHealthStatus(
            status=overall_status,
            services=services,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
