"""Logistics domain API package."""

from logistics.api.errors import register_logistics_exception_handlers
from logistics.api.routes import deal_router, maintenance_router, parcel_router

__all__ = ["deal_router", "parcel_router", "maintenance_router", "register_logistics_exception_handlers"]
