from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ...core.database import database_manager
from ...core.events import health_check_events
from ...core.setting import get_settings

router = APIRouter()


@router.get("/health")
async def health_check():
    """
    Replica database reachability plus product consumer state.

    A stopped consumer only degrades the service: the replica can still be
    read, it just stops following the catalog.
    """
    settings = get_settings()
    checks = {}

    try:
        await database_manager.ping()
        checks["replica_database"] = "healthy"
    except Exception as e:
        checks["replica_database"] = f"unhealthy: {e}"

    consumer_running = await health_check_events()
    checks["product_consumer"] = "healthy" if consumer_running else "degraded"

    if checks["replica_database"] != "healthy":
        status = "unhealthy"
    elif not consumer_running:
        status = "degraded"
    else:
        status = "healthy"

    return JSONResponse(
        status_code=503 if status == "unhealthy" else 200,
        content={
            "service": settings.SERVICE_NAME,
            "version": settings.APP_VERSION,
            "status": status,
            "checks": checks,
        },
    )
