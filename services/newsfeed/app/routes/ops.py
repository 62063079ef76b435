from fastapi import APIRouter, Depends, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from services.newsfeed.app.dependencies import get_health_checker
from shared.utils.health import HealthChecker

router = APIRouter(prefix="/api", tags=["ops"])


@router.get("/health")
def health(checker: HealthChecker = Depends(get_health_checker)):
    """Comprehensive health check endpoint."""
    return checker.run_all_checks()


@router.get("/health/live")
def liveness_check():
    """Liveness check endpoint."""
    return {"status": "alive", "service": "newsfeed"}


@router.get("/health/ready")
def readiness_check(checker: HealthChecker = Depends(get_health_checker)):
    """Readiness check endpoint."""
    return checker.readiness(["storage"])


@router.get("/metrics")
def metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
