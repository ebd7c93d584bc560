"""
API route handlers for the Rental Management API.
"""

from .users import router as users_router
from .properties import router as properties_router
from .leases import router as leases_router
from .payments import router as payments_router
from .maintenance import router as maintenance_router

__all__ = [
    "users_router",
    "properties_router",
    "leases_router",
    "payments_router",
    "maintenance_router",
]
