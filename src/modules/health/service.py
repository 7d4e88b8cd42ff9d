from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from src.core.base import BaseService


@dataclass
class HealthCheckResult:
    """Result of a health check."""

    service: str
    status: Literal["healthy", "unhealthy"]
    connected: bool
    error: str | None = None


@dataclass
class OverallHealthStatus:
    """Overall health status with the database check result."""

    status: Literal["healthy", "unhealthy"]
    database: HealthCheckResult
    timestamp: str


class HealthService(BaseService):
    """Service for performing health checks on the database."""

    async def check_database_health(self) -> HealthCheckResult:
        """Database connection health check."""
        try:
            result = await self.db.execute(text("SELECT 1"))
            result.scalar()
        except SQLAlchemyError as e:
            self.logger.error(f"Database health check error: {e}")
            return HealthCheckResult(
                service="database",
                status="unhealthy",
                connected=False,
                error=str(e),
            )

        return HealthCheckResult(service="database", status="healthy", connected=True)

    async def run_all_checks(self) -> OverallHealthStatus:
        database = await self.check_database_health()
        return OverallHealthStatus(
            status=database.status,
            database=database,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
