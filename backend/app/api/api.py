"""
Main API router aggregator (mounted at /api)
"""
from fastapi import APIRouter

from app.api.endpoints import (
    admin,
    appointments,
    auth,
    cases,
    contact,
    documents,
    messages,
    site,
    user,
)

api_router = APIRouter()

# Include routers
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(user.router, prefix="/user", tags=["User"])
api_router.include_router(cases.router, prefix="/cases", tags=["Cases"])
api_router.include_router(documents.router, prefix="/documents", tags=["Documents"])
api_router.include_router(appointments.router, prefix="/appointments", tags=["Appointments"])
api_router.include_router(messages.router, prefix="/messages", tags=["Messages"])
api_router.include_router(messages.preparers_router, prefix="/preparers", tags=["Messages"])
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])
api_router.include_router(contact.router, prefix="/contact", tags=["Public Site"])
api_router.include_router(site.router, prefix="/site", tags=["Public Site"])
