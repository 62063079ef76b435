"""
Health check utilities for DevBytes.
Provides health monitoring and status reporting.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from shared.app_logging.logger import get_logger
from shared.config.settings import Settings, get_settings
from shared.storage.base import StorageBackend


class HealthStatus(Enum):
    """Health status enumeration."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    DEGRADED = "degraded"
    UNKNOWN = "unknown"


@dataclass
class HealthCheck:
    """Individual health check result."""

    name: str
    status: HealthStatus
    message: str
    response_time_ms: Optional[float] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: datetime = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now(timezone.utc)


class HealthChecker:
    """Health checker for the service and its collaborators."""

    def __init__(self, service_name: str, settings: Optional[Settings] = None):
        self.service_name = service_name
        self.logger = get_logger(f"{service_name}.health")
        self.checks: List[Callable[[], HealthCheck]] = []
        self.settings = settings or get_settings()

    def add_check(self, check_func: Callable[[], HealthCheck]):
        """Add a health check function."""
        self.checks.append(check_func)

    def check_storage(self, storage: StorageBackend) -> HealthCheck:
        """Check the storage backend answers."""
        start_time = datetime.now()
        healthy = storage.ping()
        response_time = (datetime.now() - start_time).total_seconds() * 1000
        return HealthCheck(
            name="storage",
            status=HealthStatus.HEALTHY if healthy else HealthStatus.UNHEALTHY,
            message=f"{storage.name} storage {'reachable' if healthy else 'unreachable'}",
            response_time_ms=response_time,
            details={"backend": storage.name},
        )

    def check_news_api(self) -> HealthCheck:
        """Without a key only cached articles can be served."""
        if self.settings.news.configured:
            return HealthCheck(
                name="news_api",
                status=HealthStatus.HEALTHY,
                message="GNews API key configured",
                details={"base_url": self.settings.news.base_url},
            )
        return HealthCheck(
            name="news_api",
            status=HealthStatus.DEGRADED,
            message="GNews API key missing; only cached articles are served",
        )

    def check_llm(self) -> HealthCheck:
        """Without a key summaries and chat use the local fallbacks."""
        if self.settings.llm.configured:
            return HealthCheck(
                name="llm",
                status=HealthStatus.HEALTHY,
                message="Language-model API key configured",
                details={"model": self.settings.llm.model},
            )
        return HealthCheck(
            name="llm",
            status=HealthStatus.DEGRADED,
            message="Language-model API key missing; fallback responses active",
        )

    def run_all_checks(self) -> Dict[str, Any]:
        """Run all registered health checks."""
        results = []
        overall_status = HealthStatus.HEALTHY

        for check_func in self.checks:
            try:
                result = check_func()
            except Exception as e:
                self.logger.exception(f"Health check {getattr(check_func, '__name__', check_func)} raised")
                result = HealthCheck(
                    name=getattr(check_func, "__name__", "check"),
                    status=HealthStatus.UNHEALTHY,
                    message=f"Health check failed with exception: {str(e)}",
                )
            results.append(result)

            if result.status == HealthStatus.UNHEALTHY:
                overall_status = HealthStatus.UNHEALTHY
            elif result.status == HealthStatus.DEGRADED and overall_status == HealthStatus.HEALTHY:
                overall_status = HealthStatus.DEGRADED

        return {
            "service": self.service_name,
            "status": overall_status.value,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "checks": [
                {
                    "name": check.name,
                    "status": check.status.value,
                    "message": check.message,
                    "response_time_ms": check.response_time_ms,
                    "details": check.details,
                    "timestamp": check.timestamp.isoformat(),
                }
                for check in results
            ],
        }

    def readiness(self, critical: List[str]) -> Dict[str, Any]:
        """Ready when every critical check is healthy."""
        health_data = self.run_all_checks()
        critical_checks = [check for check in health_data["checks"] if check["name"] in critical]
        all_critical_healthy = all(check["status"] == "healthy" for check in critical_checks)

        return {
            "status": "ready" if all_critical_healthy else "not_ready",
            "service": self.service_name,
            "critical_dependencies": {
                check["name"]: check["status"] for check in critical_checks
            },
        }


def create_newsfeed_health_checker(storage: StorageBackend, settings: Optional[Settings] = None) -> HealthChecker:
    """Create health checker for the news feed service."""
    checker = HealthChecker("newsfeed", settings)

    def storage_check() -> HealthCheck:
        return checker.check_storage(storage)

    checker.add_check(storage_check)
    checker.add_check(checker.check_news_api)
    checker.add_check(checker.check_llm)
    return checker
