"""
POS API main application.
Entry point for the FastAPI server.
"""

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from sqlalchemy import text

from shared.config.settings import settings
from shared.infrastructure.correlation import CorrelationIdMiddleware
from shared.infrastructure.db import SessionLocal
from shared.infrastructure.events import get_event_circuit_breaker, get_redis_sync_client
from pos_api.core import configure_cors, lifespan
from pos_api.routers import tables_router


app = FastAPI(
    title="POS Table Moves API",
    description="Moves orders, kitchen tickets and items between dining tables",
    version="0.1.0",
    lifespan=lifespan,
)

configure_cors(app)
app.add_middleware(CorrelationIdMiddleware)

app.include_router(tables_router)


# =============================================================================
# Health Check
# =============================================================================


@app.get("/api/health")
def health_check():
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "service": "pos-api",
        "environment": settings.environment,
    }


@app.get("/api/health/detailed")
def detailed_health_check():
    """
    Detailed health check that verifies connectivity to dependencies.
    Returns status of PostgreSQL and Redis connections.
    """
    checks = {
        "service": "pos-api",
        "environment": settings.environment,
        "dependencies": {},
    }
    all_healthy = True

    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
        checks["dependencies"]["postgresql"] = {"status": "healthy"}
    except Exception as e:
        checks["dependencies"]["postgresql"] = {"status": "unhealthy", "error": str(e)}
        all_healthy = False

    try:
        get_redis_sync_client().ping()
        checks["dependencies"]["redis"] = {"status": "healthy"}
    except Exception as e:
        checks["dependencies"]["redis"] = {"status": "unhealthy", "error": str(e)}
        all_healthy = False

    checks["event_circuit_breaker"] = get_event_circuit_breaker().get_stats()
    checks["status"] = "healthy" if all_healthy else "degraded"

    if not all_healthy:
        return JSONResponse(content=checks, status_code=503)
    return checks


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("pos_api.main:app", host="0.0.0.0", port=settings.api_port)
