from fastapi import APIRouter, Depends

from content_api.config.settings import Settings
from content_api.dependencies import Stores, get_settings_from_app, get_stores

router = APIRouter()


@router.get("/health")
def health_check(
    settings: Settings = Depends(get_settings_from_app),
    stores: Stores = Depends(get_stores),
):
    """
    Health check endpoint for monitoring API status and store readiness.
    """
    health_status = {
        "status": "ok",
        "message": f"{settings.app_name} is running",
        "environment": settings.environment,
        "version": settings.api_version,
        "components": {
            "api": "ready",
            "database": "ready",
        },
    }

    try:
        if not stores.records.ping():
            health_status["components"]["database"] = "unreachable"
            health_status["status"] = "degraded"
    except Exception as e:
        health_status["components"]["database"] = f"error: {str(e)}"
        health_status["status"] = "degraded"

    return health_status
