"""
Database models for the Rental Management API.
Includes users, properties, leases, payments, maintenance requests, images and utility bills.
"""

from rental_api.models.user import User, UserRole
from rental_api.models.property import Property
from rental_api.models.image import PropertyImage
from rental_api.models.lease import Lease
from rental_api.models.payment import RentPayment, PaymentStatus, PaymentType
from rental_api.models.maintenance import MaintenanceRequest, MaintenanceStatus
from rental_api.models.utility_bill import UtilityBill

__all__ = [
    "User",
    "UserRole",
    "Property",
    "PropertyImage",
    "Lease",
    "RentPayment",
    "PaymentStatus",
    "PaymentType",
    "MaintenanceRequest",
    "MaintenanceStatus",
    "UtilityBill",
]
