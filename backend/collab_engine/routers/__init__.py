"""Collab Engine - API Routers"""
from .matching import router as matching_router
from .brand_fit import router as brand_fit_router
from .admin import router as admin_router

__all__ = [
    "matching_router",
    "brand_fit_router",
    "admin_router",
]
