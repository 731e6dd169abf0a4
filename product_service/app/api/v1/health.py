from typing import Any, Dict

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ...core.database import database_manager
from ...core.event_management import health_check_events
from ...core.setting import get_settings
from ...utils.service_health import ProductServiceHealthChecker

router = APIRouter()

settings = get_settings()
health_checker = ProductServiceHealthChecker(settings.SERVICE_NAME)


async def _database_probe() -> Dict[str, Any]:
    await database_manager.ping()
    return {"status": "healthy", "component": "catalog_database"}


async def _kafka_probe() -> Dict[str, Any]:
    connected = await health_check_events()
    return {
        "status": "healthy" if connected else "degraded",
        "component": "kafka_producer",
        "topic": settings.KAFKA_TOPIC_PRODUCT,
    }


health_checker.add_check("database", _database_probe)
health_checker.add_check("kafka", _kafka_probe, critical=False)


@router.get("/health")
async def health_check():
    """Liveness plus database and Kafka producer status"""
    report = await health_checker.run_checks()
    report["version"] = settings.APP_VERSION
    status_code = 503 if report["status"] == "unhealthy" else 200
    return JSONResponse(status_code=status_code, content=report)
