"""
API Routes Module
"""
from .health import router as health_router
from .reports import router as reports_router
from .analysis import router as analysis_router

__all__ = [
    "health_router",
    "reports_router",
    "analysis_router",
]
