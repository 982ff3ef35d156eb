"""API v1 router aggregation."""

from fastapi import APIRouter

from agora.api.v1.endpoints import broadcast, health, otp

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(otp.router, prefix="/otp", tags=["otp"])
api_router.include_router(broadcast.router, prefix="/broadcast", tags=["broadcast"])
