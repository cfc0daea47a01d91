"""API routers."""
from .monitoring import router as monitoring_router
from .on_call import router as on_call_router

__all__ = ["monitoring_router", "on_call_router"]
