"""Health check and service info endpoints."""

from fastapi import APIRouter, Request

from common.config import config
from common.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(tags=["health"])


@router.get("/")
async def root():
    """Root endpoint with basic info."""
    return {
        "service": "Service Bus Emulator Explorer API",
        "version": "0.1.0",
        "status": "running",
        "description": "Browse and message the queues, topics and subscriptions of an Azure Service Bus emulator",
        "endpoints": {
            "health": "/health",
            "docs": "/docs",
            "entities": "/api/entities",
            "resolve": "/api/entities/resolve?name=events|sub1",
            "peek": "/api/entities/{name}/messages",
            "send": "/api/messages/{name}",
        },
    }


@router.get("/health")
async def health_check():
    """Liveness probe."""
    return {"status": "healthy", "service": "sbemulator-explorer"}


@router.get("/health/debug")
async def debug_check(request: Request):
    """Report which connections are configured (presence only, never values)."""
    entity_service = request.app.state.entity_service

    checks = {
        "status": "checking",
        "config": {
            "asb_resource_name": config.asb_resource_name,
            "asb_sql_database": config.asb_sql_database,
            "service_bus_use_websocket": config.service_bus_use_websocket,
        },
        "emulator_sql": {"configured": entity_service.store.is_configured},
        "service_bus": {"configured": entity_service.service_bus.is_configured},
    }

    if checks["emulator_sql"]["configured"]:
        try:
            catalog = await entity_service.list_entities()
            checks["emulator_sql"]["entity_count"] = len(catalog)
        except Exception as e:
            checks["emulator_sql"]["error"] = f"{type(e).__name__}: {e}"

    sql_ok = checks["emulator_sql"]["configured"] and "error" not in checks["emulator_sql"]
    checks["status"] = "healthy" if (sql_ok and checks["service_bus"]["configured"]) else "unhealthy"

    logger.info(f"Debug check result: {checks}")
    return checks
