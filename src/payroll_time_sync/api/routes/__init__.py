"""API routes."""

from payroll_time_sync.api.routes.health import router as health_router
from payroll_time_sync.api.routes.time_sync import router as time_sync_router

__all__ = ["time_sync_router", "health_router"]
