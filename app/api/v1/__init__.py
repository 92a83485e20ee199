"""
API v1 router aggregation.
"""
from fastapi import APIRouter

from app.api.v1.endpoints import auth, admin, automation

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(auth.router)

api_router.include_router(
    admin.router,
    prefix="/admin",
    tags=["Admin"],
)

api_router.include_router(
    automation.router,
    prefix="/automation",
    tags=["Automation"],
)
