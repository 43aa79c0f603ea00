"""
API router aggregator: wires all endpoint modules together.
"""

from fastapi import APIRouter

from app.api.endpoints import (
    auth,
    customers,
    feedback,
    info,
    invoices,
    services,
    users,
    vehicles,
)

api_router = APIRouter()

# Registration & login
api_router.include_router(auth.router)

# Garage resources
api_router.include_router(customers.router)
api_router.include_router(vehicles.router)
api_router.include_router(services.router)
api_router.include_router(invoices.router)
api_router.include_router(feedback.router)

# User administration
api_router.include_router(users.router)

# Health, info, role probes
api_router.include_router(info.router)
