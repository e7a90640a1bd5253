"""API routers."""
from .reports import router as reports_router
from .records import router as records_router
from .status import router as status_router

__all__ = ["reports_router", "records_router", "status_router"]
