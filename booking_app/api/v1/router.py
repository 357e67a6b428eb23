"""
API v1 router setup
Tenant is resolved upstream and passed in the X-Tenant-ID header
"""
from fastapi import APIRouter

from booking_app.api.v1 import appointments, availability

api_v1_router = APIRouter()

api_v1_router.include_router(availability.router)
api_v1_router.include_router(appointments.router)


@api_v1_router.get("/", tags=["Info"])
async def api_info():
    """API information and available endpoints."""
    return {
        "version": "1.0",
        "tenant_header": "X-Tenant-ID",
        "endpoints": {
            "slots": "GET /api/v1/availability/slots",
            "check": "POST /api/v1/availability/check",
            "appointments": "GET|POST /api/v1/appointments",
            "stats": "GET /api/v1/appointments/stats",
        }
    }
