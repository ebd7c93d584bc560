"""
Rental Management API.
Property rental backend for landlords, tenants and administrators.
"""
