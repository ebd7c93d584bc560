"""
Middleware package for the Rental Management API.
"""

from .request_context import RequestContextMiddleware

__all__ = ["RequestContextMiddleware"]
